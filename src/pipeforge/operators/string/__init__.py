"""String operators: edit one text field of every item."""
