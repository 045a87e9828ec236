"""Source operators: fetch data from the web."""
