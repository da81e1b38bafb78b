import io
import logging
import os
import time

import requests

logger = logging.getLogger(__name__)

EXPORT_URL = "https://docs.google.com/spreadsheets/d/{spreadsheet_id}/export"


class SheetDownloadError(Exception):
    """The export could not be fetched or is not CSV"""


def build_export_url(spreadsheet_id, gid=None):
    """CSV export URL of one tab of a Google spreadsheet"""
    url = EXPORT_URL.format(spreadsheet_id=spreadsheet_id) + "?format=csv"
    if gid is not None:
        url += f"&gid={gid}"
    return url


class SheetExportClient:
    """
    Downloads the application sheet's CSV export.

    A bearer token is sent when SHEETS_ACCESS_TOKEN is set, for sheets that
    are not shared by link.
    """

    def __init__(self, timeout=60, max_retries=3, access_token=None):
        self.timeout = timeout
        self.max_retries = max_retries
        self.session = requests.Session()

        access_token = access_token or os.getenv('SHEETS_ACCESS_TOKEN')
        self.headers = {"Accept": "text/csv"}
        if access_token:
            self.headers["Authorization"] = f"Bearer {access_token}"

    def _get(self, url):
        for attempt in range(self.max_retries):
            try:
                response = self.session.get(url, headers=self.headers, timeout=self.timeout)
                response.raise_for_status()
                return response

            except requests.exceptions.Timeout as e:
                logger.warning(f"Timeout on attempt {attempt + 1} downloading {url}: {e}")
                if attempt == self.max_retries - 1:
                    logger.error(f"Max retries exceeded downloading {url}")
                    raise SheetDownloadError(f"Timed out downloading {url}") from e
                time.sleep(2 ** attempt)

            except requests.exceptions.ConnectionError as e:
                logger.warning(f"Connection error on attempt {attempt + 1} downloading {url}: {e}")
                if attempt == self.max_retries - 1:
                    logger.error(f"Max retries exceeded downloading {url}")
                    raise SheetDownloadError(f"Could not connect to {url}") from e
                time.sleep(2 ** attempt)

            except requests.exceptions.RequestException as e:
                logger.error(f"Request error downloading {url}: {e}")
                raise SheetDownloadError(f"Download failed: {e}") from e

    def download(self, url, destination=None):
        """
        Fetch the export at `url`.

        Returns a binary buffer with the CSV, or writes it to `destination`
        and returns that path.
        """
        response = self._get(url)

        # A sheet that is not shared comes back as an HTML sign-in page
        content_type = response.headers.get('Content-Type', '')
        if 'text/html' in content_type:
            raise SheetDownloadError(
                f"Expected CSV from {url} but got {content_type}; is the sheet shared?"
            )

        logger.info(f"Downloaded {len(response.content)} bytes from {url}")
        if destination is None:
            return io.BytesIO(response.content)

        with open(destination, 'wb') as f:
            f.write(response.content)
        return destination
