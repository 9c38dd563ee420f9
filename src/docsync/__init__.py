"""DocSync - keep a jj/git working directory synchronized automatically."""

__version__ = "0.1.0"
