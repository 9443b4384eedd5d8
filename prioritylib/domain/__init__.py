"""Domain layer: task records, classification and pairwise rating."""
