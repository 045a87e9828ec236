"""List and field transforms (category "operators")."""
