from .csv_writer import ensure_directory, project_records, sanitize_value, write_csv

__all__ = ['ensure_directory', 'project_records', 'sanitize_value', 'write_csv']
