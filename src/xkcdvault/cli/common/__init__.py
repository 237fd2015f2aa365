"""Common CLI building blocks: context, options, error handling, output."""
