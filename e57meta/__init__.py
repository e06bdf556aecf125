"""Reading and writing the XML metadata of E57 point cloud files."""

__version__ = "0.11.10"
__all__ = ["errors", "record", "xmlutil", "transform", "pointcloud", "root"]