


SYLLABUS = "Business Writing Basics\nGrammar and Tenses\nPhonics Practice\n"


def test_fallback_plan_for_sample_syllabus(client):
    r = client.post("/generate-lessons", json={"text": SYLLABUS, "totalLessons": 3})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("application/json")
    assert r.headers["X-Lesson-Source"] == "fallback"
    lessons = r.json()
    assert [l["dayNumber"] for l in lessons] == [1, 2, 3]
    assert lessons[0]["quiz"]["questions"][0]["correctAnswer"] == "Formal Communication"
    assert lessons[2]["quiz"]["questions"][0]["correctAnswer"] == "Pronunciation Workshop"
    for lesson in lessons:
        q = lesson["quiz"]["questions"][0]
        assert len(q["options"]) == 4
        assert q["correctAnswer"] in q["options"]


def test_default_lesson_count_is_twenty(client):
    r = client.post("/generate-lessons", json={"text": SYLLABUS})
    assert r.status_code == 200
    assert len(r.json()) == 20


def test_missing_text_is_client_error(client):
    r = client.post("/generate-lessons", json={})
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Missing text content"
    assert body["details"] == []


def test_blank_text_is_client_error(client):
    r = client.post("/generate-lessons", json={"text": "   "})
    assert r.status_code == 400


def test_out_of_range_count_is_client_error(client):
    assert client.post("/generate-lessons", json={"text": SYLLABUS, "totalLessons": 0}).status_code == 400
    assert client.post("/generate-lessons", json={"text": SYLLABUS, "totalLessons": 10000}).status_code == 400


def test_non_json_body_is_client_error(client):
    r = client.post("/generate-lessons", content=b"not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid request body"


def test_get_is_not_allowed(client):
    assert client.get("/generate-lessons").status_code == 405

