"""
End-to-end tests through the JSON API.
"""

import datetime

from examprep_app.modules.shared.utils.time_utils import to_iso, utcnow

CORRECT_BY_SECTION = {'s1': 'А', 's2': 'Б', 's3': 'В'}


def _correct_letter(question_id):
    return CORRECT_BY_SECTION[question_id.split('-')[0]]


class TestCatalogApi:

    def test_summary(self, client):
        data = client.get('/api/catalog').get_json()['data']

        assert data['totalQuestions'] == 10
        assert [s['questionCount'] for s in data['sections']] == [5, 3, 2]

    def test_unknown_section(self, client):
        response = client.get('/api/catalog/sections/9')

        assert response.status_code == 404
        assert response.get_json()['code'] == 'NOT_FOUND'

    def test_unknown_endpoint_is_json(self, client):
        response = client.get('/api/nothing-here')

        assert response.status_code == 404
        assert response.get_json()['success'] is False


class TestExamApi:

    def _start(self, client, body=None):
        response = client.post('/api/exam/sessions', json=body)
        assert response.status_code == 201
        return response.get_json()['data']

    def test_full_exam_feeds_history_and_memory(self, client):
        session = self._start(client, {'questionsPerSection': {'1': 2, '2': 1}, 'shuffleQuestions': False})

        assert len(session['questions']) == 3
        assert all('correctAnswer' not in q for q in session['questions'])
        assert session['questionsBySection'].keys() == {'1', '2'}

        for question in session['questions']:
            response = client.post(
                f"/api/exam/sessions/{session['id']}/answers",
                json={'questionId': question['id'], 'selectedAnswer': _correct_letter(question['id'])},
            )
            assert response.get_json()['data']['isCorrect'] is True

        progress = client.get(f"/api/exam/sessions/{session['id']}").get_json()['data']['progress']
        assert progress == {'answered': 3, 'total': 3, 'percentage': 100}

        result = client.post(f"/api/exam/sessions/{session['id']}/complete", json={}).get_json()['data']
        assert result['score'] == 100
        assert result['passed'] is True
        assert [r['sectionNumber'] for r in result['sectionResults']] == [1, 2]

        history = client.get('/api/exam/history').get_json()['data']
        assert [h['sessionId'] for h in history] == [session['id']]

        stats = client.get('/api/fsrs/stats').get_json()['data']
        assert stats['totalCards'] == 3
        assert stats['learningCards'] == 3

    def test_completed_session_is_gone(self, client):
        session = self._start(client, {'questionsPerSection': {'3': 1}})
        client.post(f"/api/exam/sessions/{session['id']}/complete", json={'updateMemory': False})

        response = client.post(f"/api/exam/sessions/{session['id']}/complete", json={})

        assert response.status_code == 404
        assert response.get_json()['code'] == 'SESSION_NOT_FOUND'
        assert client.get('/api/fsrs/stats').get_json()['data']['totalCards'] == 0

    def test_unanswered_exam_fails(self, client):
        session = self._start(client, {'questionsPerSection': {'2': 2}})
        result = client.post(f"/api/exam/sessions/{session['id']}/complete", json={}).get_json()['data']

        assert result['unanswered'] == 2
        assert result['score'] == 0
        assert result['passed'] is False

    def test_answer_for_unknown_question(self, client):
        session = self._start(client, {'questionsPerSection': {'1': 1}})
        response = client.post(
            f"/api/exam/sessions/{session['id']}/answers",
            json={'questionId': 'not-in-exam', 'selectedAnswer': 'А'},
        )

        assert response.status_code == 404
        assert response.get_json()['code'] == 'QUESTION_NOT_FOUND'

    def test_default_config_draws_what_is_available(self, client):
        session = self._start(client)
        assert len(session['questions']) == 10

    def test_saved_config_becomes_default(self, client):
        response = client.put('/api/exam/config', json={'questionsPerSection': {'1': 1, '3': 1}})
        assert response.status_code == 200

        assert client.get('/api/exam/config').get_json()['data']['questionsPerSection'] == {'1': 1, '3': 1}
        assert len(self._start(client)['questions']) == 2

    def test_negative_quota_rejected(self, client):
        response = client.put('/api/exam/config', json={'questionsPerSection': {'1': -1}})

        assert response.status_code == 400
        assert response.get_json()['code'] == 'VALIDATION_ERROR'

    def test_clear_history(self, client):
        session = self._start(client, {'questionsPerSection': {'1': 1}})
        client.post(f"/api/exam/sessions/{session['id']}/complete", json={'updateMemory': False})

        client.delete('/api/exam/history')

        assert client.get('/api/exam/history').get_json()['data'] == []


class TestFsrsApi:

    def test_review_and_due_queue(self, client):
        response = client.post('/api/fsrs/review', json={'questionId': 's1-q1', 'rating': 1})
        card = response.get_json()['data']

        assert response.status_code == 200
        assert card['state'] == 1
        assert card['reps'] == 1
        assert 0 < card['retrievability'] <= 1

        assert client.get('/api/fsrs/due').get_json()['data']['count'] == 0
        assert client.get('/api/fsrs/next').get_json()['data']['card'] is None

    def test_invalid_rating(self, client):
        response = client.post('/api/fsrs/review', json={'questionId': 's1-q1', 'rating': 5})

        assert response.status_code == 400
        assert response.get_json()['code'] == 'VALIDATION_ERROR'

    def test_exam_outcome(self, client):
        card = client.post('/api/fsrs/review/exam', json={'questionId': 's1-q2', 'isCorrect': False}).get_json()['data']
        assert card['state'] == 1

    def test_preview(self, client):
        data = client.get('/api/fsrs/preview/s1-q1').get_json()['data']

        assert sorted(data['previews']) == ['1', '2', '3', '4']
        assert data['previews']['3']['label'] == '10m'
        assert data['previews']['2']['label'] == '5m'
        # same-day steps schedule zero whole days
        assert data['previews']['3']['interval'] == 0
        assert data['previews']['4']['interval'] >= 1
        assert client.get('/api/fsrs/stats').get_json()['data']['totalCards'] == 0

    def test_config_update_and_validation(self, client):
        response = client.put('/api/fsrs/config', json={'maximumInterval': 21})
        assert response.get_json()['data']['maximumInterval'] == 21

        response = client.put('/api/fsrs/config', json={'requestRetention': 2})
        assert response.status_code == 400
        assert response.get_json()['code'] == 'INVALID_CONFIG'
        assert client.get('/api/fsrs/config').get_json()['data']['maximumInterval'] == 21

    def test_exam_prep_and_overview(self, client):
        exam_date = utcnow() + datetime.timedelta(days=10, hours=12)

        data = client.post('/api/fsrs/config/exam-prep', json={'examDate': to_iso(exam_date)}).get_json()['data']

        assert data['daysUntilExam'] == 11
        assert data['config']['maximumInterval'] == 11
        assert data['config']['requestRetention'] == 0.95

        overview = client.get('/api/stats/overview').get_json()['data']
        assert overview['exam']['daysUntilExam'] == 11
        assert overview['history']['totalExams'] == 0

    def test_overview_without_exam_date(self, client):
        assert client.get('/api/stats/overview').get_json()['data']['exam'] is None

    def test_export_import_and_clear(self, client):
        client.post('/api/fsrs/review', json={'questionId': 's1-q1', 'rating': 3})
        client.post('/api/fsrs/review', json={'questionId': 's2-q1', 'rating': 4})
        backup = client.get('/api/fsrs/export').get_json()['data']
        assert len(backup['cards']) == 2

        response = client.post('/api/fsrs/import?profileId=other', json=backup)
        assert response.get_json()['data'] == {'cards': 2, 'reviewLogs': 2}
        assert client.get('/api/fsrs/stats?profileId=other').get_json()['data']['totalCards'] == 2

        client.delete('/api/fsrs/data')
        assert client.get('/api/fsrs/stats').get_json()['data']['totalCards'] == 0
        assert client.get('/api/fsrs/stats?profileId=other').get_json()['data']['totalCards'] == 2

    def test_import_rejects_malformed_backup(self, client):
        response = client.post('/api/fsrs/import', json={'cards': [{'profileId': 'x'}]})

        assert response.status_code == 400
        assert response.get_json()['code'] == 'VALIDATION_ERROR'

    def test_migrate(self, client):
        data = client.post('/api/fsrs/migrate', json={'viewedQuestionIds': ['s1-q1', 's1-q2']}).get_json()['data']
        assert data == {'migrated': 2}


class TestProfileApi:

    def test_profile_lifecycle(self, client):
        assert client.get('/api/profile').get_json()['data']['profile'] is None

        response = client.post('/api/profile', json={'name': '  Anna  '})
        assert response.status_code == 201
        assert response.get_json()['data']['profile']['name'] == 'Anna'

        assert client.post('/api/profile/touch').status_code == 200

        client.delete('/api/profile')
        assert client.get('/api/profile').get_json()['data']['profile'] is None
        assert client.post('/api/profile/touch').status_code == 404

    def test_blank_name_rejected(self, client):
        response = client.post('/api/profile', json={'name': '   '})
        assert response.status_code == 400


class TestStudyApi:

    def test_questions_show_answers(self, client):
        questions = client.get('/api/study/questions?section=2').get_json()['data']

        assert [q['id'] for q in questions] == ['s2-q1', 's2-q2', 's2-q3']
        assert all(q['correctAnswer'] == 'Б' for q in questions)
        assert not any(q['viewed'] for q in questions)

    def test_unknown_section(self, client):
        assert client.get('/api/study/questions?section=9').status_code == 404

    def test_viewed_progress_and_migration(self, client):
        totals = client.post('/api/study/viewed', json={'questionId': 's2-q1'}).get_json()['data']
        assert totals == {'viewed': 1, 'total': 10, 'percentage': 10}

        questions = client.get('/api/study/questions?section=2').get_json()['data']
        assert [q['viewed'] for q in questions] == [True, False, False]

        progress = client.get('/api/study/progress').get_json()['data']
        assert progress['total']['viewed'] == 1
        section_two = [s for s in progress['sections'] if s['sectionNumber'] == 2][0]
        assert section_two['percentage'] == 33

        migrated = client.post('/api/study/progress/migrate').get_json()['data']
        assert migrated == {'migrated': 1, 'viewed': 1}

        client.delete('/api/study/progress')
        assert client.get('/api/study/progress').get_json()['data']['total']['viewed'] == 0

    def test_viewed_unknown_question(self, client):
        response = client.post('/api/study/viewed', json={'questionId': 'nope'})
        assert response.status_code == 404
