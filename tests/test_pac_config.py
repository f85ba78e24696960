import json

import pytest

from pac_config import DEFAULT_CONFIG, ConfigError, load_config, make_config, validate_config


def test_missing_file_gives_defaults(tmp_path):
    cfg = load_config(tmp_path / "nope.json")
    assert cfg == DEFAULT_CONFIG
    assert cfg is not DEFAULT_CONFIG


def test_malformed_file_warns_and_falls_back(tmp_path, capsys):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    cfg = load_config(path)
    assert cfg["population_size"] == DEFAULT_CONFIG["population_size"]
    assert "[WARN]" in capsys.readouterr().out


def test_nested_rewards_merge_key_by_key(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"population_size": 8, "rewards": {"death": -1.0}}))
    cfg = load_config(path)
    assert cfg["population_size"] == 8
    assert cfg["rewards"]["death"] == -1.0
    assert cfg["rewards"]["pellet"] == DEFAULT_CONFIG["rewards"]["pellet"]
    assert DEFAULT_CONFIG["rewards"]["death"] == -500.0


def test_make_config_overrides():
    cfg = make_config({"max_steps": 10}, seed=3)
    assert cfg["max_steps"] == 10
    assert cfg["seed"] == 3


def test_validate_accepts_defaults_and_summing_rates():
    validate_config(make_config())
    validate_config(make_config(selection_rate=0.2))


@pytest.mark.parametrize(
    "overrides",
    [
        {"selection_rate": 0.5},
        {"mutation_rate": 1.5},
        {"crossover_rate": -0.1},
        {"population_size": 0},
        {"generations": -1},
        {"episodes_per_individual": 0},
        {"max_steps": 0},
        {"tournament_size": 0},
        {"tournament_size": 21},
        {"elitism_count": 21},
        {"tile_size": 0},
        {"gene_limit": -1.0},
    ],
)
def test_validate_rejects(overrides):
    with pytest.raises(ConfigError):
        validate_config(make_config(overrides))


def test_unknown_keys_warn_in_file(tmp_path, capsys):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"popsize": 8, "rewards": {"deth": -1.0}}))
    cfg = load_config(path)
    out = capsys.readouterr().out
    assert "'popsize'" in out
    assert "'rewards.deth'" in out
    assert "popsize" not in cfg
    assert "deth" not in cfg["rewards"]


def test_unknown_keys_rejected_in_code():
    with pytest.raises(ConfigError):
        make_config(popsize=8)


def test_extra_milestone_is_kept(tmp_path, capsys):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"rewards": {"milestones": {"0.9": 800.0}}}))
    cfg = load_config(path)
    assert cfg["rewards"]["milestones"]["0.9"] == 800.0
    assert cfg["rewards"]["milestones"]["0.5"] == 250.0
    assert capsys.readouterr().out == ""
    assert "0.9" not in DEFAULT_CONFIG["rewards"]["milestones"]
