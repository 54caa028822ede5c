import pytest

OWNER = {"X-User-Id": "owner-1"}
STRANGER = {"X-User-Id": "someone-else"}


def body(quiz_id, *pairs):
    return {"quizId": quiz_id, "answers": [{"questionId": q, "answerId": a} for q, a in pairs]}


@pytest.fixture
def private_quiz(quiz_repo):
    quiz = quiz_repo.add_quiz("private-1", owner="owner-1", is_public=False)
    quiz_repo.add_question("private-1", "p1", order=1, answers=[("pa", True), ("pb", False)])
    return quiz


class TestTakeQuiz:
    def test_hides_answer_key(self, client, two_question_quiz):
        response = client.get('/api/quiz/quiz-1/take')

        assert response.status_code == 200
        data = response.get_json()
        assert data["id"] == "quiz-1"
        assert [q["id"] for q in data["questions"]] == ["q1", "q2"]
        for question in data["questions"]:
            for answer in question["answers"]:
                assert "isCorrect" not in answer

    def test_missing_quiz(self, client):
        response = client.get('/api/quiz/nope/take')

        assert response.status_code == 404
        assert response.get_json()["error"] == "Quiz not found"

    def test_private_quiz_forbidden_for_others(self, client, private_quiz):
        assert client.get('/api/quiz/private-1/take').status_code == 403
        assert client.get('/api/quiz/private-1/take', headers=STRANGER).status_code == 403
        assert client.get('/api/quiz/private-1/take', headers=OWNER).status_code == 200


class TestSubmitQuiz:
    def test_scores_submission(self, client, attempt_repo, two_question_quiz):
        response = client.post('/api/quiz/quiz-1/submit', json=body("quiz-1", ("q1", "a1"), ("q2", "b2")))

        assert response.status_code == 200
        data = response.get_json()
        assert data["quizId"] == "quiz-1"
        assert data["score"] == 10
        assert data["maxScore"] == 20
        assert data["percentage"] == 50.0
        assert data["correctAnswers"] == 1
        assert data["totalQuestions"] == 2
        assert data["answers"][1] == {
            "questionId": "q2",
            "selectedAnswerId": "b2",
            "correctAnswerId": "b1",
            "isCorrect": False,
            "points": 0,
        }
        assert len(attempt_repo.attempts) == 1
        assert attempt_repo.attempts[0].user_id is None

    def test_records_signed_in_user(self, client, attempt_repo, two_question_quiz):
        client.post('/api/quiz/quiz-1/submit', json=body("quiz-1"), headers=STRANGER)

        assert attempt_repo.attempts[0].user_id == "someone-else"
        assert attempt_repo.attempts[0].percentage == 0

    def test_quiz_id_mismatch(self, client, attempt_repo, two_question_quiz):
        response = client.post('/api/quiz/quiz-1/submit', json=body("quiz-2", ("q1", "a1")))

        assert response.status_code == 400
        assert attempt_repo.attempts == []

    @pytest.mark.parametrize("payload", [
        None,
        {},
        {"quizId": "quiz-1"},
        {"quizId": "quiz-1", "answers": [{"questionId": "q1"}]},
        {"quizId": "quiz-1", "answers": "a1"},
    ])
    def test_malformed_body(self, client, two_question_quiz, payload):
        response = client.post('/api/quiz/quiz-1/submit', json=payload)

        assert response.status_code == 400
        assert response.get_json()["error"] == "Invalid submission."

    def test_missing_quiz(self, client):
        response = client.post('/api/quiz/nope/submit', json=body("nope"))

        assert response.status_code == 404

    def test_access_is_checked_before_the_body(self, client, private_quiz):
        assert client.post('/api/quiz/private-1/submit', json={"quizId": "private-1"}).status_code == 403
        assert client.post('/api/quiz/nope/submit', json={"quizId": "nope"}).status_code == 404
        assert client.post('/api/quiz/nope/submit', data="not json").status_code == 404

    def test_private_quiz(self, client, attempt_repo, private_quiz):
        response = client.post('/api/quiz/private-1/submit', json=body("private-1", ("p1", "pa")))

        assert response.status_code == 403
        assert attempt_repo.attempts == []


class TestQuizStats:
    def test_stats_with_formatted_count(self, client, attempt_repo, two_question_quiz):
        for index in range(12):
            attempt_repo.add("quiz-1", f"user-{index}", 50)

        response = client.get('/api/quiz/quiz-1/stats')

        assert response.status_code == 200
        assert response.get_json() == {
            "completionCount": 12,
            "averageScore": 50,
            "formattedCompletionCount": "10+",
        }

    def test_stats_for_unattempted_quiz(self, client, two_question_quiz):
        data = client.get('/api/quiz/quiz-1/stats').get_json()

        assert data["completionCount"] == 0
        assert data["averageScore"] == 0
        assert data["formattedCompletionCount"] == "0"

    def test_stats_for_private_quiz(self, client, private_quiz):
        assert client.get('/api/quiz/private-1/stats').status_code == 403
        assert client.get('/api/quiz/private-1/stats', headers=OWNER).status_code == 200


class TestQuizDetail:
    def test_owner_sees_answer_key(self, client, attempt_repo, two_question_quiz):
        attempt_repo.add("quiz-1", "user-1", 40)

        response = client.get('/api/quiz/quiz-1', headers=OWNER)

        assert response.status_code == 200
        data = response.get_json()
        assert data["userId"] == "owner-1"
        assert data["stats"] == {"completionCount": 1, "averageScore": 40}
        first = data["questions"][0]["answers"]
        assert [a["isCorrect"] for a in first] == [True, False]

    def test_others_do_not(self, client, two_question_quiz):
        data = client.get('/api/quiz/quiz-1', headers=STRANGER).get_json()

        for question in data["questions"]:
            for answer in question["answers"]:
                assert "isCorrect" not in answer
