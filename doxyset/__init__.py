"""doxyset - doxygen XML to object database, XHTML and documentation set converter."""

__version__ = "1.0.0"
