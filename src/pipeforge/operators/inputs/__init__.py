"""User-input operators: values supplied by the person running the pipe."""
