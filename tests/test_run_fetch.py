import json

import pytest

import run_fetch
from job_aggregator.models import ListingPage


def test_parse_args_defaults():
    args = run_fetch.parse_args([])
    query = run_fetch.build_query(args)
    assert args.out == "jobs.json"
    assert query.q is None and query.location is None
    assert (query.work_type, query.employment_type, query.seniority, query.category) == ("all",) * 4
    assert query.page == 1


def test_parse_args_maps_filters():
    args = run_fetch.parse_args([
        "--query", "python", "--location", "berlin", "--work-type", "remote",
        "--employment-type", "contract", "--seniority", "senior", "--category", "Technology", "--page", "2",
    ])
    query = run_fetch.build_query(args)
    assert query.q == "python"
    assert query.location == "berlin"
    assert query.work_type == "remote"
    assert query.employment_type == "contract"
    assert query.seniority == "senior"
    assert query.category == "Technology"
    assert query.page == 2


def test_parse_args_rejects_unknown_work_type():
    with pytest.raises(SystemExit):
        run_fetch.parse_args(["--work-type", "space"])


def test_main_writes_envelope(tmp_path, monkeypatch):
    seen = {}

    async def fake_run(query, settings):
        seen["query"] = query
        return ListingPage(jobs=[], total=0, sources={"remotive": 0})

    monkeypatch.setattr(run_fetch, "run", fake_run)
    out = tmp_path / "out" / "jobs.json"

    run_fetch.main(["--out", str(out), "--query", "nurse"])

    assert seen["query"].q == "nurse"
    assert json.loads(out.read_text(encoding="utf-8")) == {"jobs": [], "total": 0, "sources": {"remotive": 0}}
