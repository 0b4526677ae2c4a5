"""Task runner building blocks: crate and git info, workspaces, environment, functions, profiles and installers."""

__version__ = "0.1.0"