from src.observability.tools.file_tools import list_files, write_file

__all__ = ["list_files", "write_file"]
