"""Tests for sidetrackbot.py - the check pipeline and command-line entry point"""

import json
from unittest.mock import Mock, patch

import pytest

import sidetrackbot
from core.reply import NOT_FOUND_TEXT, SideTracker


@pytest.fixture(autouse=True)
def no_config_file(monkeypatch, temp_dir):
    """Keep tests independent of a local config/config.yaml and the real environment."""
    monkeypatch.setattr(sidetrackbot, "CONFIG_FILE", temp_dir / "missing.yaml")
    for key in ("BLUESKY_IDENTIFIER", "BLUESKY_PASSWORD", "OPENAI_API_KEY", "OPENAI_MODEL", "DRY_RUN"):
        monkeypatch.delenv(key, raising=False)


class TestCheck:
    def test_accuses_post_named_by_locator(self, sample_thread):
        bluesky = Mock()
        bluesky.get_post_thread.return_value = sample_thread
        locator = Mock()
        locator.locate.side_effect = lambda posts: posts[3]

        reply = sidetrackbot.check("at://did:plc:x/app.bsky.feed.post/3leb44umzuc2l", bluesky, locator)

        bluesky.get_post_thread.assert_called_once_with("at://did:plc:x/app.bsky.feed.post/3leb44umzuc2l")
        assert reply.text.startswith("最有可能的歪楼犯：@dave.bsky.social\n罪证：说到保险，大家买重疾险了吗\n求推荐\n")
        assert reply.reply.parent.uri.endswith("/3leb44umzuc2l")
        assert reply.reply.root.uri.endswith("/3leb3root0001")

    def test_locator_sees_numbered_posts(self, sample_thread):
        bluesky = Mock()
        bluesky.get_post_thread.return_value = sample_thread
        locator = Mock()
        locator.locate.return_value = None

        reply = sidetrackbot.check("at://x/app.bsky.feed.post/y", bluesky, locator)

        posts = locator.locate.call_args.args[0]
        assert [p.position for p in posts] == [1, 2, 3, 4, 5]
        assert reply.text == NOT_FOUND_TEXT


class TestMain:
    def test_invalid_address(self):
        assert sidetrackbot.main(["--console", "--quiet", "check", "not-a-post"]) == 2

    def test_missing_explicit_config(self, temp_dir):
        assert sidetrackbot.main(["--config", str(temp_dir / "nope.yaml"), "check", "at://a/b/c"]) == 1

    @patch("sidetrackbot.openai.OpenAI")
    @patch("sidetrackbot.BlueskyClient")
    @patch("sidetrackbot.check")
    def test_dry_run_prints_reply(self, check, bluesky_cls, openai_cls, capsys, root_post, entrance_post):
        check.return_value = SideTracker(None, root_post, entrance_post).build_reply()

        code = sidetrackbot.main(
            ["--console", "--quiet", "--dry-run", "check", "https://bsky.app/profile/did:plc:test/post/entrance"]
        )

        assert code == 0
        assert check.call_args.args[0] == "at://did:plc:test/app.bsky.feed.post/entrance"
        bluesky_cls.return_value.login_or_restore.assert_called_once()
        bluesky_cls.return_value.create_reply.assert_not_called()
        printed = json.loads(capsys.readouterr().out)
        assert printed["text"] == NOT_FOUND_TEXT
        assert printed["reply"]["parent"]["uri"] == entrance_post.uri

    @patch("sidetrackbot.openai.OpenAI")
    @patch("sidetrackbot.BlueskyClient")
    @patch("sidetrackbot.check")
    def test_posts_reply(self, check, bluesky_cls, openai_cls):
        reply = Mock()
        check.return_value = reply

        code = sidetrackbot.main(["--console", "--quiet", "check", "at://did:plc:test/app.bsky.feed.post/entrance"])

        assert code == 0
        bluesky_cls.return_value.create_reply.assert_called_once_with(reply)

    @patch("sidetrackbot.openai.OpenAI")
    @patch("sidetrackbot.BlueskyClient")
    def test_failures_exit_nonzero(self, bluesky_cls, openai_cls):
        bluesky_cls.return_value.get_post_thread.side_effect = RuntimeError("network down")

        code = sidetrackbot.main(["--console", "--quiet", "check", "at://did:plc:test/app.bsky.feed.post/entrance"])

        assert code == 1
