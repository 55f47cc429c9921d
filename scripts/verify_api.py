"""
End-to-end smoke check against a running (or temporarily started) backend.

Walks the main user journey: signup, interests, Gemini key, generic feed,
save/unsave an article, logout. Uses in-memory storage when it starts the
server itself.
"""

import httpx
import time
import sys
import subprocess
import os
import uuid

HOST = "http://127.0.0.1:8000"
BASE_URL = f"{HOST}/api"


def check_backend():
    try:
        r = httpx.get(f"{HOST}/health", timeout=2)
        return r.status_code == 200
    except httpx.HTTPError:
        return False


def start_backend():
    print("Starting temporary backend...")
    env = {**os.environ, "STORAGE_BACKEND": "memory"}
    p = subprocess.Popen([sys.executable, "-m", "uvicorn", "newsflow.main:app", "--host", "127.0.0.1", "--port", "8000"],
                         cwd=os.path.join(os.getcwd(), "backend"),
                         env=env,
                         stdout=subprocess.PIPE,
                         stderr=subprocess.PIPE)
    for i in range(20):
        if check_backend():
            print("Backend started.")
            return p
        time.sleep(1)
    print("Backend failed to start.")
    p.terminate()
    return None


def expect(label, r, status):
    if r.status_code != status:
        print(f"[FAIL] {label}: expected {status}, got {r.status_code} {r.text[:200]}")
        return False
    print(f"[PASS] {label}")
    return True


def verify_api():
    suffix = uuid.uuid4().hex[:8]
    with httpx.Client(base_url=BASE_URL, timeout=20) as client:
        r = client.post("/auth/signup", json={
            "email": f"smoke_{suffix}@example.com",
            "password": "smoke-test-password",
            "username": f"smoke_{suffix}",
        })
        if not expect("Signup", r, 201):
            return
        user_id = r.json()["id"]

        r = client.get("/user")
        if expect("Session user", r, 200) and r.json()["id"] != user_id:
            print("[FAIL] Session user id does not match signup")

        r = client.put("/interests", json={"categories": ["technology", "space exploration"]})
        expect("Save interests", r, 201)
        r = client.get("/interests")
        if expect("Read interests", r, 200):
            print(f"  Categories: {r.json()['categories']}")

        r = client.get("/news/personalized")
        expect("Personalized feed without key is rejected", r, 400)

        r = client.post("/gemini-key", json={"gemini_key": "AIza-smoke-test"})
        expect("Save Gemini key", r, 201)

        r = client.get("/news", params={"category": "technology"})
        if r.status_code == 200:
            print(f"[PASS] Generic feed returned {len(r.json())} articles")
        else:
            print(f"[WARN] Generic feed returned {r.status_code} (NEWS_API_KEY set?)")

        article = {"article_id": "https://example.com/smoke", "title": "Smoke", "url": "https://example.com/smoke"}
        expect("Save article", client.post("/saved-articles", json=article), 201)
        expect("Duplicate save rejected", client.post("/saved-articles", json=article), 400)
        expect("Unsave article", client.delete("/saved-articles/https://example.com/smoke"), 200)

        expect("Logout", client.post("/auth/logout"), 200)
        expect("Session cleared", client.get("/user"), 401)


if __name__ == "__main__":
    proc = None
    if not check_backend():
        proc = start_backend()
        if proc is None:
            sys.exit(1)
    try:
        verify_api()
    finally:
        if proc:
            proc.terminate()
