from infrastructure.storage.browser_storage import AREA_LOCAL, AREA_SESSION, BrowserStorage, flush_all


def test_hydrates_only_own_area_from_cookies():
    cookies = {
        "tk_local_accessToken": "abc%2Edef",
        "tk_session_oauthLinkIntent": "true",
        "unrelated": "x",
    }
    state = {}
    local = BrowserStorage(AREA_LOCAL, state, cookies=cookies)
    session = BrowserStorage(AREA_SESSION, state, cookies=cookies)

    assert local.get("accessToken") == "abc.def"
    assert "oauthLinkIntent" not in local
    assert session.get("oauthLinkIntent") == "true"


def test_mirror_survives_new_instances_in_same_tab():
    state = {}
    BrowserStorage(AREA_LOCAL, state)["accessToken"] = "t1"

    again = BrowserStorage(AREA_LOCAL, state, cookies={"tk_local_accessToken": "stale"})
    assert again["accessToken"] == "t1"


def test_writes_queue_cookie_script_with_max_age():
    storage = BrowserStorage(AREA_LOCAL, {}, max_age=120)
    storage["accessToken"] = "tok"

    script = storage.pending_script()
    assert storage.has_pending_writes()
    assert "tk_local_accessToken=tok" in script
    assert "max-age=120" in script


def test_remove_many_is_one_queued_statement():
    state = {}
    storage = BrowserStorage(AREA_LOCAL, state)
    storage["accessToken"] = "a"
    storage["refreshToken"] = "r"
    storage.take_pending()

    storage.remove_many(["accessToken", "refreshToken"])

    assert storage.get("accessToken") is None
    assert storage.get("refreshToken") is None
    assert len(state["_browser_storage_local_pending"]) == 1


def test_flush_renders_once_and_clears_queue():
    storage = BrowserStorage(AREA_LOCAL, {})
    storage["accessToken"] = "a"
    rendered = []

    assert storage.flush(rendered.append) is True
    assert storage.flush(rendered.append) is False
    assert len(rendered) == 1


def test_flush_all_puts_navigation_after_every_write():
    state = {}
    local = BrowserStorage(AREA_LOCAL, state)
    session = BrowserStorage(AREA_SESSION, state)
    session["oauthLinkIntent"] = "true"
    local["accessToken"] = "a"
    rendered = []

    flush_all([session, local, None], rendered.append, redirect_url="https://kauth.example/authorize")

    assert len(rendered) == 1
    script = rendered[0]
    assert script.index("tk_session_oauthLinkIntent") < script.index("window.parent.location.href")
    assert script.index("tk_local_accessToken") < script.index("window.parent.location.href")
