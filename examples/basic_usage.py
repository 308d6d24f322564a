"""Basic usage example for ChatBridge.

Start the proxy first:

    chatbridge serve -c examples/config.example.json
"""

import httpx

BASE_URL = "http://127.0.0.1:8080"

# Models advertised by the proxy
print(httpx.get(f"{BASE_URL}/v1/models").json())

# Buffered completion - reply is reshaped into the OpenAI format
response = httpx.post(
    f"{BASE_URL}/v1/chat/completions",
    json={
        "model": "gpt-4o",
        "messages": [{"role": "user", "content": "What is the capital of France?"}],
        "temperature": 0.5,
        "stream": False,
    },
    timeout=None,
)
print(f"Response: {response.json()['choices'][0]['message']['content']}")

# Streamed completion - raw Chatbot UI text, relayed as it arrives
with httpx.stream(
    "POST",
    f"{BASE_URL}/v1/chat/completions",
    json={
        "model": "gpt-4o",
        "messages": [{"role": "user", "content": "Write a haiku about proxies"}],
        "stream": True,
    },
    timeout=None,
) as stream:
    for text in stream.iter_text():
        print(text, end="", flush=True)
print()
