import json

from typer.testing import CliRunner

from floorkernel.cli import app, load_polygons

runner = CliRunner()

ROOMS = {
    "kitchen": [[0, 0], [2, 0], [2, 2], [0, 2]],
    "living": [[2, 0], [4, 0], [4, 2], [2, 2]],
}


def write_rooms(tmp_path, data=ROOMS):
    path = tmp_path / "rooms.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_load_polygons_accepts_list_and_object(tmp_path):
    assert list(load_polygons(write_rooms(tmp_path))) == ["kitchen", "living"]
    assert list(load_polygons(write_rooms(tmp_path, list(ROOMS.values())))) == ["room_0", "room_1"]


def test_merge_writes_outline(tmp_path):
    output = tmp_path / "out" / "merged.json"
    result = runner.invoke(app, ["merge", "--input", str(write_rooms(tmp_path)), "--output", str(output)])

    assert result.exit_code == 0, result.output
    assert "Merged polygons" in result.output
    assert json.loads(output.read_text(encoding="utf-8")) == [[[0.0, 0.0], [4.0, 0.0], [4.0, 2.0], [0.0, 2.0]]]


def test_walls_lists_every_wall(tmp_path):
    result = runner.invoke(app, ["walls", "-i", str(write_rooms(tmp_path)), "-t", "15"])
    assert result.exit_code == 0, result.output
    assert "Walls" in result.output


def test_missing_file_exits_with_error(tmp_path):
    result = runner.invoke(app, ["merge", "--input", str(tmp_path / "missing.json")])
    assert result.exit_code == 1
    assert "File not found" in result.output


def test_invalid_polygon_exits_with_error(tmp_path):
    result = runner.invoke(app, ["walls", "-i", str(write_rooms(tmp_path, {"a": [[0, 0], [1, 0]]}))])
    assert result.exit_code == 1
    assert "Error" in result.output
