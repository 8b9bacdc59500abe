"""stylepipe: compile, prefix and watch Sass stylesheets."""

__version__ = "0.1.0"
