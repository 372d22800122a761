import auth


def test_session_token_roundtrip():
    token = auth.issue_session_token(now=1000)
    assert auth.verify_session_token(token, now=1001)


def test_session_token_expires():
    token = auth.issue_session_token(now=1000)
    assert not auth.verify_session_token(token, now=1000 + auth.settings.SESSION_MAX_AGE + 1)


def test_tampered_or_missing_token():
    expires, signature = auth.issue_session_token(now=1000).split(".")
    assert not auth.verify_session_token(f"{int(expires) + 60}.{signature}", now=1001)
    assert not auth.verify_session_token("anything", now=1001)
    assert not auth.verify_session_token(None)


def test_check_password():
    assert auth.check_password("secret")
    assert not auth.check_password("admin")
    assert not auth.check_password(None)
