"""Learner profile, exam history and study progress kept in a key-value store."""

module_metadata = {
    'name': 'Learner Profile',
    'url_prefix': '/api/profile',
    'enabled': True
}
