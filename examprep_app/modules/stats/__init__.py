"""Read-side statistics over exam history and memory cards."""

module_metadata = {
    'name': 'Statistics',
    'url_prefix': '/api/stats',
    'enabled': True
}
