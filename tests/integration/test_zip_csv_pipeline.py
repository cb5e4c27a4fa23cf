"""End-to-end pipeline run over the httpx transport."""

from __future__ import annotations

import httpx

from core.pipeline_spec import load_pipeline_file
from extract.http_transport import HttpxTransport
from pipeline.runner import run_pipeline
from tests.fakes import RecordingLoader
from tests.fixture_paths import build_zip, fixture_path


def test_pre_extracted_zipped_shift_jis_csv_reaches_loader() -> None:
    """Pre-extraction, unzip and convert should chain into one load."""
    csv_text = "都道府県,人口 総数\n東京都,14047594\n大阪府,8837685\n"
    archive = build_zip({"population.csv": csv_text.encode("shift_jis")})
    seen_bodies: list[bytes] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/latest":
            return httpx.Response(
                200, content=b'<a href="/files/pop_2020.zip"></a><a href="/files/pop_2015.zip">'
            )
        seen_bodies.append(request.content)
        return httpx.Response(200, content=archive)

    request = load_pipeline_file(str(fixture_path("pipelines/valid_pipeline.json")))
    loader = RecordingLoader()
    client = httpx.Client(transport=httpx.MockTransport(_handler))
    with HttpxTransport(client=client) as transport:
        result = run_pipeline(request, transport, loader)
    client.close()

    assert seen_bodies == [b"files=pop_2020%2Cpop_2015%2C"]
    assert result.columns == ("都道府県", "人口_総数")
    assert loader.calls[0][2].decode("utf-8") == "東京都,14047594\n大阪府,8837685\n"
