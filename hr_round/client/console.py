# hr_round/client/console.py
"""
Terminal rendition of the interview page.

    hr-round-client --email me@example.com --password secret INTERVIEW_ID

Type an answer and press enter. `:audio PATH` transcribes a recording and
submits the transcript, `:restart` starts over, `:quit` leaves (progress is kept).
"""
import argparse
import getpass
import json
import os
import sys

import httpx

from hr_round.client.session import InterviewSession, StateStore

ROLE_LABELS = {"interviewer": "Interviewer", "user": "You", "system": "--"}


def _print_messages(messages, start=0):
    for msg in messages[start:]:
        print(f"{ROLE_LABELS.get(msg['role'], msg['role'])}: {msg['content']}")


def _login(http: httpx.Client, email: str, password: str) -> str:
    r = http.post("/auth/login_json", json={"email": email, "password": password})
    r.raise_for_status()
    return r.json()["access_token"]


def run(session: InterviewSession) -> int:
    state = session.load()
    _print_messages(state.messages)
    shown = len(state.messages)

    while not session.state.complete:
        try:
            line = input("> ").strip()
        except EOFError:
            print()
            return 0
        if not line:
            continue
        if line == ":quit":
            return 0
        if line == ":restart":
            session.restart()
            shown = 0
        else:
            video_url = None
            try:
                if line.startswith(":audio "):
                    path = line.split(" ", 1)[1].strip()
                    video_url = session.upload_recording(path)
                    line = session.transcribe(path)
                    print(f"(transcript) {line}")
                session.submit_answer(line, video_url=video_url)
            except OSError as e:
                print(f"error: {e}", file=sys.stderr)
                continue
            except httpx.HTTPStatusError as e:
                print(f"error: {e.response.status_code} {e.response.text}", file=sys.stderr)
                continue
        _print_messages(session.state.messages, shown)
        shown = len(session.state.messages)

    print(json.dumps(session.results(), indent=2))
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="hr-round-client", description="Take an HR mock interview in the terminal")
    parser.add_argument("interview_id")
    parser.add_argument("--base-url", default=os.getenv("HR_ROUND_URL", "http://127.0.0.1:8000"))
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", default=None)
    parser.add_argument("--state-dir", default=None, help="where session progress is kept (default ~/.hr_round)")
    parser.add_argument("--results", action="store_true", help="print results and exit")
    args = parser.parse_args(argv)

    http = httpx.Client(base_url=args.base_url, timeout=120.0)
    try:
        token = _login(http, args.email, args.password or getpass.getpass("Password: "))
        session = InterviewSession(args.interview_id, token, store=StateStore(args.state_dir), http=http)
        if args.results:
            print(json.dumps(session.results(), indent=2))
            return 0
        return run(session)
    except httpx.HTTPError as e:
        print(f"request failed: {e}", file=sys.stderr)
        return 1
    finally:
        http.close()


if __name__ == "__main__":
    sys.exit(main())
