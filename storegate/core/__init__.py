"""Authorization domain: permission evaluation and route guarding."""
