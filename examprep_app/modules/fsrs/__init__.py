"""FSRS memory model: per-question review cards, scheduling and backups."""

module_metadata = {
    'name': 'Memory Model (FSRS)',
    'url_prefix': '/api/fsrs',
    'enabled': True
}
