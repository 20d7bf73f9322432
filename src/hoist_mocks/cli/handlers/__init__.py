from .hoist import handle_hoist, collect_source_files
