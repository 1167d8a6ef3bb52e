"""Practice exams: stratified question selection, answers and scoring."""

module_metadata = {
    'name': 'Practice Exam',
    'url_prefix': '/api/exam',
    'enabled': True
}
