from unittest.mock import MagicMock, patch

import pytest
import requests

from sheets.client import SheetDownloadError, SheetExportClient, build_export_url

URL = 'https://docs.google.com/spreadsheets/d/abc/export?format=csv&gid=0'


def _response(content=b'a,b\n1,2\n', content_type='text/csv'):
    response = MagicMock()
    response.content = content
    response.headers = {'Content-Type': content_type}
    return response


@pytest.fixture
def client(monkeypatch):
    monkeypatch.delenv('SHEETS_ACCESS_TOKEN', raising=False)
    client = SheetExportClient(max_retries=3)
    client.session = MagicMock()
    return client


def test_build_export_url():
    assert build_export_url('abc') == 'https://docs.google.com/spreadsheets/d/abc/export?format=csv'
    assert build_export_url('abc', gid=0) == URL


class TestAuthorization:
    def test_token_from_environment(self, monkeypatch):
        monkeypatch.setenv('SHEETS_ACCESS_TOKEN', 'secret')
        assert SheetExportClient().headers['Authorization'] == 'Bearer secret'

    def test_no_token(self, client):
        assert 'Authorization' not in client.headers


class TestDownload:
    def test_returns_buffer(self, client):
        client.session.get.return_value = _response()

        buffer = client.download(URL)

        assert buffer.read() == b'a,b\n1,2\n'
        client.session.get.assert_called_once_with(URL, headers=client.headers, timeout=60)

    def test_writes_destination(self, client, tmp_path):
        client.session.get.return_value = _response()
        destination = tmp_path / 'sheet.csv'

        assert client.download(URL, destination) == destination
        assert destination.read_bytes() == b'a,b\n1,2\n'

    def test_sign_in_page_is_rejected(self, client):
        client.session.get.return_value = _response(b'<html>', 'text/html; charset=utf-8')

        with pytest.raises(SheetDownloadError, match='shared'):
            client.download(URL)

    @patch('sheets.client.time.sleep')
    def test_retries_timeouts_with_backoff(self, sleep, client):
        client.session.get.side_effect = [
            requests.exceptions.Timeout('slow'),
            requests.exceptions.ConnectionError('reset'),
            _response(),
        ]

        client.download(URL)

        assert client.session.get.call_count == 3
        assert [call.args[0] for call in sleep.call_args_list] == [1, 2]

    @patch('sheets.client.time.sleep')
    def test_gives_up_after_max_retries(self, sleep, client):
        client.session.get.side_effect = requests.exceptions.Timeout('slow')

        with pytest.raises(SheetDownloadError, match='Timed out'):
            client.download(URL)
        assert client.session.get.call_count == 3

    def test_http_errors_are_not_retried(self, client):
        response = _response()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError('403')
        client.session.get.return_value = response

        with pytest.raises(SheetDownloadError, match='Download failed'):
            client.download(URL)
        assert client.session.get.call_count == 1
