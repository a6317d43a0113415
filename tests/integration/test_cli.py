"""
CLI smoke tests: run main() in-process on temporary JSON files.
"""

import json

import pytest

import echo_playlists.logging_utils as logging_utils
from main_app import main, parse_key_values


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logging_utils.reset_logging()
    logging_utils.set_run_id(None)


@pytest.fixture()
def catalog_file(tmp_path):
    tracks = [
        {
            "id": f"t{i}",
            "title": f"Song {i}",
            "artist": {"id": f"a{i // 2}", "name": f"Artist {i // 2}", "genres": ["rock"]},
            "duration_ms": 180_000,
            "audio_features": {"energy": 0.5, "valence": 0.5, "danceability": 0.5},
        }
        for i in range(12)
    ]
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"tracks": tracks}), encoding="utf-8")
    return path


class TestParseKeyValues:
    """Test key=value option parsing."""

    def test_parse(self):
        assert parse_key_values(["valence=0.8", " energy = 0.5"], numeric=True) == {"valence": 0.8, "energy": 0.5}
        assert parse_key_values(["max_repeat_artist=1"]) == {"max_repeat_artist": "1"}
        assert parse_key_values(None) == {}

    def test_missing_separator(self):
        with pytest.raises(ValueError):
            parse_key_values(["valence"])


class TestMain:
    """Test the CLI entry point."""

    def test_prints_playlist_json(self, catalog_file, capsys):
        code = main([
            "--catalog", str(catalog_file),
            "--algorithm", "similarity",
            "--seed-track", "t0",
            "--tracks", "5",
            "--rule", "max_repeat_artist=1",
            "--quiet",
        ])
        assert code == 0

        output = json.loads(capsys.readouterr().out)
        assert output["algorithm"] == "similarity"
        assert len(output["tracks"]) == 5
        artists = [t["artist"]["id"] for t in output["tracks"]]
        assert len(set(artists)) == 5
        assert output["metadata"]["rules"]["max_repeat_artist"] == 1

    def test_output_file_with_analysis(self, catalog_file, tmp_path, capsys):
        out = tmp_path / "playlist.json"
        code = main([
            "--catalog", str(catalog_file),
            "--algorithm", "mood",
            "--mood", "valence=0.5",
            "--tracks", "4",
            "--output", str(out),
            "--analyze",
            "--quiet",
        ])
        assert code == 0
        assert capsys.readouterr().out == ""

        output = json.loads(out.read_text(encoding="utf-8"))
        assert output["analysis"]["track_count"] == 4
        assert output["analysis"]["genres"] == {"rock": 4}

    def test_history_ids_use_catalog_records(self, catalog_file, tmp_path, capsys):
        history = tmp_path / "history.json"
        history.write_text(json.dumps([
            {"track_id": "t0"},
            {"track_id": "t0"},
            {"track_id": "t2"},
        ]), encoding="utf-8")
        code = main([
            "--catalog", str(catalog_file),
            "--history", str(history),
            "--algorithm", "similarity",
            "--tracks", "5",
            "--quiet",
        ])
        assert code == 0

        output = json.loads(capsys.readouterr().out)
        tracks = {t["id"]: t for t in output["tracks"]}
        assert len(tracks) == 5
        assert {"t0", "t2"} <= set(tracks)
        for track_id, track in tracks.items():
            assert track["title"] == f"Song {track_id[1:]}"
            assert track["artist"]["name"].startswith("Artist ")
        assert tracks["t0"]["play_count"] == 2

    def test_list_algorithms(self, capsys):
        assert main(["--list-algorithms"]) == 0
        ids = [entry["id"] for entry in json.loads(capsys.readouterr().out)]
        assert ids == ["similarity", "mood", "genre", "tempo", "discovery", "history", "hybrid"]

    def test_empty_catalog_exit_code(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text("[]", encoding="utf-8")
        assert main(["--catalog", str(path), "--quiet"]) == 2

    def test_missing_catalog_file(self, tmp_path):
        assert main(["--catalog", str(tmp_path / "missing.json"), "--quiet"]) == 1

    def test_bad_config(self, catalog_file, tmp_path, capsys):
        config = tmp_path / "config.yaml"
        config.write_text("generation:\n  max_catalog_size: 0\n", encoding="utf-8")
        assert main(["--catalog", str(catalog_file), "--config", str(config)]) == 1
        assert "Configuration Error" in capsys.readouterr().err

    def test_catalog_required(self):
        with pytest.raises(SystemExit):
            main([])
