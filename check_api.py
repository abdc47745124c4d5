# check_api.py - smoke-check a running chat API
import json
import os

import requests

BASE_URL = os.getenv("BASE_URL", "http://localhost:3001")


def show(label, response):
    print(f"📊 {label}: {response.status_code}")
    print(json.dumps(response.json(), indent=4, ensure_ascii=False))


def check_api():
    try:
        print("1. Health check...")
        show("health", requests.get(f"{BASE_URL}/api/health", timeout=10))

        print("\n2. Session creation...")
        r = requests.post(f"{BASE_URL}/api/sessions", timeout=10)
        show("create session", r)
        session_id = r.json()["sessionId"]

        print("\n3. Chat message...")
        r = requests.post(
            f"{BASE_URL}/api/chat",
            json={"chatInput": "Hello, this is a test message", "sessionId": session_id},
            timeout=120,
        )
        show("chat", r)

        print("\n4. Message retrieval...")
        show("messages", requests.get(f"{BASE_URL}/api/sessions/{session_id}/messages", timeout=10))

        print("\n✅ All API checks completed")
    except requests.RequestException as e:
        print(f"❌ Connection Error: {e}")


if __name__ == "__main__":
    check_api()
