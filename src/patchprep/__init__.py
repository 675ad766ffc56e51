"""patchprep - prepare Git patch series for mailing-list submission."""

__version__ = "0.1.0"
