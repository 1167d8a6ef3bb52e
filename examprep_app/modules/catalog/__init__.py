"""Question catalog: immutable sections of multiple-choice questions."""

module_metadata = {
    'name': 'Question Catalog',
    'url_prefix': '/api/catalog',
    'enabled': True
}
