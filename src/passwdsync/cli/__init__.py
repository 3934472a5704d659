"""passwdsync command-line interface."""
