"""Convert Postman requests into Excel Power Query connection files."""

from postman_odc.converter import Conversion, convert

__version__ = "0.1.0"

__all__ = ["Conversion", "convert", "__version__"]
