"""Org entity names and the UTF-8 glyphs they display as."""

from __future__ import annotations

ORG_ENTITIES: dict[str, str] = {
    # greek
    "alpha": "α", "beta": "β", "gamma": "γ", "delta": "δ", "epsilon": "ε",
    "varepsilon": "ε", "zeta": "ζ", "eta": "η", "theta": "θ", "iota": "ι",
    "kappa": "κ", "lambda": "λ", "mu": "μ", "nu": "ν", "xi": "ξ", "pi": "π",
    "rho": "ρ", "sigma": "σ", "tau": "τ", "upsilon": "υ", "phi": "φ",
    "varphi": "φ", "chi": "χ", "psi": "ψ", "omega": "ω",
    "Gamma": "Γ", "Delta": "Δ", "Theta": "Θ", "Lambda": "Λ", "Xi": "Ξ",
    "Pi": "Π", "Sigma": "Σ", "Phi": "Φ", "Psi": "Ψ", "Omega": "Ω",
    # arrows
    "to": "→", "rarr": "→", "rightarrow": "→", "larr": "←", "leftarrow": "←",
    "uarr": "↑", "darr": "↓", "harr": "↔", "rArr": "⇒", "Rightarrow": "⇒",
    "lArr": "⇐", "Leftarrow": "⇐", "hArr": "⇔", "iff": "⇔",
    # math
    "pm": "±", "times": "×", "div": "÷", "infin": "∞", "infty": "∞",
    "le": "≤", "leq": "≤", "ge": "≥", "geq": "≥", "ne": "≠", "neq": "≠",
    "approx": "≈", "equiv": "≡", "sum": "∑", "prod": "∏", "int": "∫",
    "partial": "∂", "nabla": "∇", "forall": "∀", "exist": "∃", "exists": "∃",
    "empty": "∅", "isin": "∈", "in": "∈", "notin": "∉", "sub": "⊂",
    "sup": "⊃", "cap": "∩", "cup": "∪", "and": "∧", "or": "∨", "not": "¬",
    "sqrt": "√", "cdot": "⋅", "prime": "′",
    # typography
    "deg": "°", "copy": "©", "reg": "®", "trade": "™", "sect": "§",
    "para": "¶", "middot": "·", "hellip": "…", "dots": "…", "mdash": "—",
    "ndash": "–", "laquo": "«", "raquo": "»", "euro": "€", "pound": "£",
    "yen": "¥", "cent": "¢", "checkmark": "✓", "nbsp": " ",
}


def entity_glyph(name: str) -> str | None:
    return ORG_ENTITIES.get(str(name or ""))
