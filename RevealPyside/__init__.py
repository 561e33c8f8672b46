"""Qt front end for org markup reveal."""
