"""Study mode: browse questions by section and track which were viewed."""

module_metadata = {
    'name': 'Study Mode',
    'url_prefix': '/api/study',
    'enabled': True
}
