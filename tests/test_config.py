import pytest

from cashflow_recon.config import default_app_config, load_app_config


def test_load_app_config_resolves_paths(tmp_path) -> None:
    cfg_path = tmp_path / "cashflow_recon_config.toml"
    cfg_path.write_text(
        "[inputs]\n"
        'bank_accounts = "input/accounts.csv"\n'
        'receivables = "input/receivables.csv"\n'
        "\n"
        "[accounts]\n"
        'selected = ["A", 7]\n'
        "\n"
        "[movements]\n"
        'on_invalid_date = "skip"\n'
        "\n"
        "[display]\n"
        'mode = "both"\n'
        "decimals = 0\n"
        'output_dir = "out"\n'
        "\n"
        "[logging]\n"
        'level = "debug"\n',
        encoding="utf-8",
    )

    cfg = load_app_config(str(cfg_path))

    assert cfg.inputs.bank_accounts == (tmp_path / "input/accounts.csv").resolve()
    assert cfg.inputs.receivables == (tmp_path / "input/receivables.csv").resolve()
    assert cfg.inputs.payables is None
    assert cfg.selected_accounts == ("A", "7")
    assert cfg.on_invalid_date == "skip"
    assert cfg.display_mode == "both"
    assert cfg.decimals == 0
    assert cfg.output_dir == (tmp_path / "out").resolve()
    assert cfg.log_level == "DEBUG"


def test_load_app_config_defaults(tmp_path) -> None:
    cfg_path = tmp_path / "empty.toml"
    cfg_path.write_text("", encoding="utf-8")

    cfg = load_app_config(str(cfg_path))
    defaults = default_app_config()

    assert cfg.selected_accounts == defaults.selected_accounts == ()
    assert cfg.on_invalid_date == defaults.on_invalid_date == "raise"
    assert cfg.display_mode == "table"
    assert cfg.decimals == 2
    assert cfg.log_level == "WARNING"


def test_missing_config_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_app_config(str(tmp_path / "nope.toml"))


@pytest.mark.parametrize(
    "content",
    [
        "[display]\nmode = 'html'\n",
        "[movements]\non_invalid_date = 'ignore'\n",
        "[accounts]\nselected = 'A'\n",
        "[display]\ndecimals = 'two'\n",
        "inputs = 3\n",
        "this is = = not toml",
    ],
)
def test_invalid_config_values(tmp_path, content) -> None:
    cfg_path = tmp_path / "bad.toml"
    cfg_path.write_text(content, encoding="utf-8")

    with pytest.raises(ValueError):
        load_app_config(str(cfg_path))
