import json

from typer.testing import CliRunner

from mxm.branchgraph.cli import app, main
from mxm.branchgraph.render import node_ids

runner = CliRunner()


def test_graph(git_repo):
    result = runner.invoke(app, ["-C", str(git_repo["path"]), "graph"])
    assert result.exit_code == 0

    lines = result.stdout.splitlines()
    assert lines[0] == "digraph {"
    assert lines[-1] == "}"
    assert sum("->" in line for line in lines) == 3
    assert f'{git_repo["main"][:9]} main"]' in result.stdout


def test_graph_json(git_repo):
    result = runner.invoke(app, ["-C", str(git_repo["path"]), "--format", "json", "graph"])
    assert result.exit_code == 0

    data = json.loads(result.stdout)
    ids = node_ids({git_repo[k]: set() for k in ("root", "main", "feature", "topic")})
    assert data["root"] == git_repo["root"]
    edges = {(e["u"], e["v"]) for e in data["edges"]}
    assert edges == {
        (ids[git_repo["root"]], ids[git_repo["main"]]),
        (ids[git_repo["root"]], ids[git_repo["feature"]]),
        (ids[git_repo["feature"]], ids[git_repo["topic"]]),
    }


def test_graph_single_branch(git_repo):
    result = runner.invoke(app, ["-C", str(git_repo["path"]), "graph", "main"])
    assert result.exit_code == 0
    assert result.stdout.splitlines() == [
        "digraph {",
        f'\t0 [label="{git_repo["main"][:9]} main"]',
        "}",
    ]


def test_graph_rich(git_repo):
    result = runner.invoke(app, ["-C", str(git_repo["path"]), "-f", "rich", "graph"])
    assert result.exit_code == 0
    assert "digraph" in result.stdout


def test_graph_unknown_branch(git_repo):
    result = runner.invoke(app, ["-C", str(git_repo["path"]), "graph", "nope"])
    assert result.exit_code == 2
    assert "Unknown branch: nope" in result.output


def test_graph_not_a_repository(tmp_path):
    plain = tmp_path / "plain"
    plain.mkdir()
    result = runner.invoke(app, ["-C", str(plain), "graph"])
    assert result.exit_code == 2
    assert "Error: Not a" in result.output
    assert "digraph" not in result.output


def test_graph_repository_subdirectory(git_repo):
    sub = git_repo["path"] / "sub"
    sub.mkdir()
    result = runner.invoke(app, ["-C", str(sub), "graph"])
    assert result.exit_code == 2
    assert "Not a repository root" in result.output


def test_graph_unrelated_histories(orphan_repo):
    result = runner.invoke(app, ["-C", str(orphan_repo["path"]), "graph"])
    assert result.exit_code == 1
    assert "digraph" not in result.output
    assert "merge-base" in result.output


def test_branches(git_repo):
    result = runner.invoke(app, ["-C", str(git_repo["path"]), "--remote", "branches"])
    assert result.exit_code == 0
    assert f'{git_repo["feature"][:9]} feature' in result.stdout
    assert f'{git_repo["root"][:9]} origin/feature' in result.stdout


def test_branches_json(git_repo):
    result = runner.invoke(app, ["-C", str(git_repo["path"]), "-f", "json", "branches", "topic"])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"branches": {git_repo["topic"]: ["topic"]}}


def test_main_returns_exit_code(git_repo):
    assert main(["-C", str(git_repo["path"]), "-q", "branches"]) == 0
    assert main(["-C", str(git_repo["path"] / ".git"), "graph"]) == 2
