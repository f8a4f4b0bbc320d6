# stage1_read_remote.py
#
# Project: Sparse PageRank - power iteration on a row-compressed matrix
#
# Description:
#   Stage 1 (remote) - Fetch a sparse matrix file that does not live on the
#   local disk.
#
#   Supported sources:
#
#     "gs://bucket/path/to/matrix.dat":
#       google.cloud.storage client.  Tries Application Default Credentials
#       first and falls back to an anonymous client for public buckets.
#
#     "http(s)://host/path/matrix.dat":
#       requests.Session with an HTTPAdapter (retries) and a streamed
#       download, so large datasets show a tqdm progress bar.
#
# References:
#   [1] Downloading objects from GCS
#       https://cloud.google.com/storage/docs/downloading-objects#download-object-python
#   [2] Graph datasets of Tsaparas et al. (text adjacency lists)
#       http://www.cs.toronto.edu/~tsap/experiments/datasets/

import os
import sys

import requests
from requests.adapters import HTTPAdapter
from google.api_core import exceptions as gcs_exceptions
from google.auth.exceptions import DefaultCredentialsError
from google.cloud import storage
from tqdm import tqdm

from sparse_pagerank.errors import SourceUnavailable
from sparse_pagerank.utils import is_quiet, print_step, print_success, print_warning, Timer

CHUNK_SIZE = 64 * 1024


def split_gcs_url(url):
    """Split `gs://bucket/object` into (bucket, object)."""
    path = url[len("gs://"):]
    bucket_name, _, blob_name = path.partition("/")
    if not bucket_name or not blob_name:
        raise SourceUnavailable(f"expected gs://bucket/object, got {url!r}")
    return bucket_name, blob_name


def _gcs_client(project=None):
    proj = project or os.environ.get('GOOGLE_CLOUD_PROJECT')
    try:
        return storage.Client(project=proj)
    except DefaultCredentialsError:
        # No credentials configured; public buckets still work anonymously
        print_warning("no Google Cloud credentials found, using anonymous client")
        return storage.Client.create_anonymous_client()


def fetch_gcs(url, project=None):
    """
    Download a GCS object as text.

    Raises:
        SourceUnavailable: the object does not exist or cannot be read
    """
    bucket_name, blob_name = split_gcs_url(url)
    print_step(f"Connecting to bucket: {bucket_name}")
    client = _gcs_client(project)
    blob = client.bucket(bucket_name).blob(blob_name)

    with Timer("Download"):
        try:
            text = blob.download_as_text()
        except gcs_exceptions.GoogleAPICallError as exc:
            raise SourceUnavailable(f"could not download {url}: {exc}") from exc

    print_success(f"Downloaded {len(text)} chars from {url}")
    return text


def _session(max_retries=3):
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=max_retries)
    session.mount('https://', adapter)
    session.mount('http://', adapter)
    return session


def fetch_http(url, timeout=60, session=None):
    """
    Download a URL as text, streaming with a progress bar.

    Raises:
        SourceUnavailable: connection failure or non-2xx status
    """
    own_session = session is None
    session = session or _session()
    chunks = []

    try:
        with Timer("Download"):
            with session.get(url, stream=True, timeout=timeout) as resp:
                resp.raise_for_status()
                total = int(resp.headers.get('content-length', 0)) or None
                with tqdm(
                    total=total,
                    desc="  Downloading",
                    unit="B",
                    unit_scale=True,
                    bar_format="  {l_bar}{bar:30}{r_bar}",
                    ncols=90,
                    file=sys.stderr,
                    disable=is_quiet(),
                ) as pbar:
                    for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                        chunks.append(chunk)
                        pbar.update(len(chunk))
                encoding = resp.encoding or 'utf-8'
    except requests.RequestException as exc:
        raise SourceUnavailable(f"could not download {url}: {exc}") from exc
    finally:
        if own_session:
            session.close()

    text = b"".join(chunks).decode(encoding)
    print_success(f"Downloaded {len(text)} chars from {url}")
    return text


def fetch_text(source):
    """Fetch a remote matrix source (gs:// or http(s)://) as text."""
    if source.startswith("gs://"):
        return fetch_gcs(source)
    if source.startswith(("http://", "https://")):
        return fetch_http(source)
    raise SourceUnavailable(f"not a remote source: {source!r}")
