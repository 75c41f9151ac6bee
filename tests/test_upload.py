"""Tests for upload backends and the post-capture upload flow."""

import time
from unittest.mock import MagicMock

import pytest
import requests


def _response(json_data=None, status=200):
    response = MagicMock()
    response.status_code = status
    response.json.return_value = json_data
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return response


IMGUR_OK = {
    "data": {"id": "aBc12", "link": "https://i.imgur.com/aBc12.png", "deletehash": "x"},
    "success": True,
    "status": 200,
}


class TestImgurBackend:
    """Tests for imgur auth and response handling."""

    def test_bearer_when_token_fresh(self, settings):
        """Test that a fresh token is sent as a bearer header."""
        from shotgrab.backends.imgur import ImgurBackend
        from shotgrab.core.types import Credentials

        now = time.time()
        backend = ImgurBackend(
            settings,
            session=MagicMock(),
            credentials=Credentials(access_token="tok", expiry=int(now + 11 * 60)),
        )
        assert backend.auth_header(now=now) == {"Authorization": "Bearer tok"}

    def test_anonymous_when_token_near_expiry(self, settings):
        """Test that a token inside the refresh window falls back to Client-ID."""
        from shotgrab.backends.imgur import ImgurBackend
        from shotgrab.core.types import Credentials

        now = time.time()
        backend = ImgurBackend(
            settings,
            session=MagicMock(),
            credentials=Credentials(access_token="tok", expiry=int(now + 9 * 60)),
        )
        assert backend.auth_header(now=now) == {
            "Authorization": f"Client-ID {settings.imgur_client_id}"
        }

    def test_anonymous_without_credentials_file(self, settings):
        """Test that no credentials file means an anonymous upload."""
        from shotgrab.backends.imgur import ImgurBackend

        backend = ImgurBackend(settings, session=MagicMock())
        assert backend.auth_header()["Authorization"].startswith("Client-ID ")

    def test_credentials_read_from_file(self, settings):
        """Test that credentials load lazily from the configured file."""
        from shotgrab.backends.imgur import ImgurBackend

        settings.credentials_file.write_text(
            f"access_token=filetok\nexpiry={int(time.time()) + 3600}\n"
        )
        backend = ImgurBackend(settings, session=MagicMock())
        assert backend.auth_header() == {"Authorization": "Bearer filetok"}

    def test_upload_returns_link(self, settings, tmp_path):
        """Test that a successful upload returns the image link."""
        from shotgrab.backends.imgur import ImgurBackend

        image = tmp_path / "img.png"
        image.write_bytes(b"png")
        session = MagicMock()
        session.post.return_value = _response(IMGUR_OK)

        link = ImgurBackend(settings, session=session).upload(image)

        assert link == "https://i.imgur.com/aBc12.png"
        args, kwargs = session.post.call_args
        assert args[0] == "https://api.imgur.com/3/image"
        assert "image" in kwargs["files"]

    def test_http_error_raises_upload_failed(self, settings, tmp_path):
        """Test that an HTTP error raises UploadFailed."""
        from shotgrab.backends.imgur import ImgurBackend
        from shotgrab.core.errors import UploadFailed

        image = tmp_path / "img.png"
        image.write_bytes(b"png")
        session = MagicMock()
        session.post.return_value = _response({}, status=429)

        with pytest.raises(UploadFailed):
            ImgurBackend(settings, session=session).upload(image)

    def test_unexpected_json_raises_upload_failed(self, settings, tmp_path):
        """Test that a rejected upload raises UploadFailed."""
        from shotgrab.backends.imgur import ImgurBackend
        from shotgrab.core.errors import UploadFailed

        image = tmp_path / "img.png"
        image.write_bytes(b"png")
        session = MagicMock()
        session.post.return_value = _response({"data": {"error": "nope"}, "success": False, "status": 400})

        with pytest.raises(UploadFailed):
            ImgurBackend(settings, session=session).upload(image)

    def test_gif_uploads_through_image_field(self, settings, tmp_path):
        """Test that gifs go up through the same image field as screenshots."""
        from shotgrab.backends.imgur import ImgurBackend

        gif = tmp_path / "gif-x.gif"
        gif.write_bytes(b"GIF89a")
        session = MagicMock()
        session.post.return_value = _response(IMGUR_OK)

        ImgurBackend(settings, session=session).upload(gif)

        files = session.post.call_args[1]["files"]
        assert list(files) == ["image"]
        assert files["image"][0] == "gif-x.gif"

    def test_anonymous_when_file_has_expiry_but_no_token(self, settings):
        """Test that an expiry without a token still uploads anonymously."""
        from shotgrab.backends.imgur import ImgurBackend

        settings.credentials_file.write_text(f"access_token=\nexpiry={int(time.time()) + 3600}\n")
        backend = ImgurBackend(settings, session=MagicMock())

        assert backend.auth_header() == {
            "Authorization": f"Client-ID {settings.imgur_client_id}"
        }

    def test_anonymous_when_expiry_overflows(self, settings):
        """Test that an expiry of inf is treated as expired instead of crashing."""
        from shotgrab.backends.imgur import ImgurBackend

        settings.credentials_file.write_text("access_token=filetok\nexpiry=inf\n")
        backend = ImgurBackend(settings, session=MagicMock())

        assert backend.auth_header()["Authorization"].startswith("Client-ID ")


class TestFiledropBackend:
    """Tests for the two-step gfycat upload."""

    def test_create_then_put(self, settings, tmp_path):
        """Test the placeholder POST followed by the PUT of the bytes."""
        from shotgrab.backends.filedrop import FiledropBackend

        gif = tmp_path / "gif.gif"
        gif.write_bytes(b"GIF89a")
        session = MagicMock()
        session.post.return_value = _response({"isOk": True, "gfyname": "happyslowcat"})
        session.put.return_value = _response(None)

        link = FiledropBackend(settings, session=session).upload(gif)

        assert link == "https://gfycat.com/happyslowcat"
        assert session.post.call_args[0][0] == "https://api.gfycat.com/v1/gfycats"
        assert session.put.call_args[0][0] == "https://filedrop.gfycat.com/happyslowcat"

    def test_missing_name_aborts_before_put(self, settings, tmp_path):
        """Test that no gfyname means no PUT."""
        from shotgrab.backends.filedrop import FiledropBackend
        from shotgrab.core.errors import UploadFailed

        gif = tmp_path / "gif.gif"
        gif.write_bytes(b"GIF89a")
        session = MagicMock()
        session.post.return_value = _response({"isOk": True})

        with pytest.raises(UploadFailed):
            FiledropBackend(settings, session=session).upload(gif)
        session.put.assert_not_called()

    def test_connection_error(self, settings, tmp_path):
        """Test that connection errors raise UploadFailed."""
        from shotgrab.backends.filedrop import FiledropBackend
        from shotgrab.core.errors import UploadFailed

        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("offline")

        with pytest.raises(UploadFailed, match="offline"):
            FiledropBackend(settings, session=session).create_placeholder()


class TestGetBackend:
    """Tests for the backend factory."""

    def test_known_backends(self, settings):
        """Test that the factory builds both backends."""
        from shotgrab.backends import FiledropBackend, ImgurBackend, get_backend

        assert isinstance(get_backend("imgur", settings), ImgurBackend)
        assert isinstance(get_backend("gfycat", settings), FiledropBackend)

    def test_unknown_backend(self, settings):
        """Test that an unknown backend name raises ConfigError."""
        from shotgrab.backends import get_backend
        from shotgrab.core.errors import ConfigError

        with pytest.raises(ConfigError):
            get_backend("dropbox", settings)


class FakeBackend:
    def __init__(self, name, url, size_limit=None):
        self.name = name
        self.url = url
        self.size_limit = size_limit
        self.uploads = []

    def get_name(self):
        return self.name

    def accepts(self, file_size):
        return self.size_limit is None or file_size < self.size_limit

    def upload(self, path):
        self.uploads.append(path)
        return self.url


class TestUploader:
    """Tests for destination choice and the post-capture flow."""

    def _uploader(self, settings, runner, choice=None):
        from shotgrab.tools.upload import Uploader

        backends = {
            "imgur": FakeBackend("imgur", "https://i.imgur.com/x.png", settings.imgur_size_limit),
            "gfycat": FakeBackend("gfycat", "https://gfycat.com/x"),
        }
        offered = []

        def menu(options, prompt):
            offered.append(options)
            return choice

        uploader = Uploader(settings, runner=runner, backends=backends, menu=menu)
        return uploader, backends, offered

    def test_small_file_offers_both(self, settings, runner):
        """Test that a file under the limit offers both services."""
        uploader, _, _ = self._uploader(settings, runner)
        limit = settings.imgur_size_limit

        assert uploader.destination_options(limit - 1) == ["imgur", "gfycat", "delete"]

    def test_file_at_ceiling_offers_only_unlimited(self, settings, runner):
        """Test that a file at or over the limit offers only gfycat."""
        uploader, _, _ = self._uploader(settings, runner)
        limit = settings.imgur_size_limit

        assert uploader.destination_options(limit) == ["gfycat", "delete"]
        assert uploader.destination_options(limit + 1) == ["gfycat", "delete"]

    def test_real_backends_respect_ceiling(self, settings, runner):
        """Test the size ceiling with the real backends."""
        from shotgrab.tools.upload import Uploader

        uploader = Uploader(settings, runner=runner)
        assert uploader.destination_options(settings.imgur_size_limit) == ["gfycat", "delete"]

    def test_menu_choice_uploads_and_copies(self, settings, runner, tmp_path):
        """Test that a menu choice uploads, copies and notifies."""
        image = tmp_path / "img.png"
        image.write_bytes(b"png")
        uploader, backends, offered = self._uploader(settings, runner, choice="imgur")

        url = uploader.handle_artifact(image)

        assert url == "https://i.imgur.com/x.png"
        assert offered == [["imgur", "gfycat", "delete"]]
        assert backends["imgur"].uploads == [image]
        xclip_inputs = [i for c, i in zip(runner.calls, runner.inputs) if c[0] == "xclip"]
        assert xclip_inputs == ["", url]
        assert runner.commands("notify-send")[-1][-1] == url

    def test_explicit_target_skips_menu(self, settings, runner, tmp_path):
        """Test that an explicit target skips the menu."""
        image = tmp_path / "img.png"
        image.write_bytes(b"png")
        uploader, backends, offered = self._uploader(settings, runner)

        uploader.handle_artifact(image, target="gfycat")

        assert offered == []
        assert backends["gfycat"].uploads == [image]

    def test_delete_choice_discards(self, settings, runner, tmp_path):
        """Test that choosing delete removes the file."""
        image = tmp_path / "img.png"
        image.write_bytes(b"png")
        uploader, backends, _ = self._uploader(settings, runner, choice="delete")

        assert uploader.handle_artifact(image) is None
        assert not image.exists()
        assert backends["imgur"].uploads == []

    def test_cancelled_menu_keeps_file(self, settings, runner, tmp_path):
        """Test that cancelling the menu keeps the file."""
        image = tmp_path / "img.png"
        image.write_bytes(b"png")
        uploader, backends, _ = self._uploader(settings, runner, choice=None)

        assert uploader.handle_artifact(image) is None
        assert image.exists()
        assert runner.commands("xclip") == []

    def test_no_upload_mode(self, settings, runner, tmp_path):
        """Test that no-upload mode only notifies."""
        from dataclasses import replace

        image = tmp_path / "img.png"
        image.write_bytes(b"png")
        uploader, backends, offered = self._uploader(replace(settings, no_upload=True), runner)

        assert uploader.handle_artifact(image, target="imgur") is None
        assert image.exists()
        assert offered == []
        assert backends["imgur"].uploads == []
        assert len(runner.commands("notify-send")) == 1

    def test_vanished_file(self, settings, runner, tmp_path):
        """Test that uploading a deleted file raises ArtifactMissing."""
        from shotgrab.core.errors import ArtifactMissing

        uploader, _, _ = self._uploader(settings, runner)
        with pytest.raises(ArtifactMissing):
            uploader.upload(tmp_path / "gone.png", "imgur")


class TestMenu:
    """Tests for the menu frontend."""

    def test_choice_returned(self, runner):
        """Test that the picked label is returned."""
        import subprocess
        from shotgrab.tools.menu import choose

        runner.handlers["dmenu"] = lambda cmd, input: subprocess.CompletedProcess(cmd, 0, stdout="gif\n")

        assert choose(runner, "dmenu -i", ["screenshot", "video", "gif"], "mode") == "gif"
        assert runner.inputs[0] == "screenshot\nvideo\ngif\n"
        assert runner.calls[0] == ["dmenu", "-i", "-p", "mode"]

    @pytest.mark.parametrize("stdout,code", [("", 0), ("gif\n", 1), ("gifs\n", 0)])
    def test_cancel_or_unknown(self, runner, stdout, code):
        """Test that cancel, errors and unknown labels return None."""
        import subprocess
        from shotgrab.tools.menu import choose

        runner.handlers["dmenu"] = lambda cmd, input: subprocess.CompletedProcess(cmd, code, stdout=stdout)
        assert choose(runner, "dmenu", ["gif"]) is None

    def test_main_menu_while_recording(self):
        """Test that only stop is offered while recording."""
        from shotgrab.tools.menu import main_menu_options

        assert main_menu_options(recording=True) == ["stop"]
        assert main_menu_options(recording=False) == ["screenshot", "video", "gif"]

    def test_default_menu_command_shows_each_prompt(self, settings, runner, tmp_path):
        """Test that the default menu command leaves room for the per-menu prompt."""
        from shotgrab.tools.menu import choose
        from shotgrab.tools.upload import Uploader

        image = tmp_path / "img.png"
        image.write_bytes(b"png")

        choose(runner, settings.menu_command, ["screenshot"], "shotgrab")
        Uploader(settings, runner=runner).choose_destination(image)

        first, second = runner.commands("dmenu")
        assert first[first.index("-p") + 1] == "shotgrab"
        assert second[second.index("-p") + 1] == "upload to"
        assert second.count("-p") == 1
