import pytest

import plan_editor
from plan_editor import PlanEditorApp
from plan_grid import parse_raw_csv, raw_to_csv
from training_weeks import record_actual_mileage, with_notes


@pytest.fixture
def plan_file(tmp_path, shifted_grid):
    path = tmp_path / 'plan.csv'
    path.write_bytes(raw_to_csv(shifted_grid).encode('utf-8'))
    return path


@pytest.fixture
def app(tmp_config):
    return PlanEditorApp(config=tmp_config)


def test_load_plan(app, plan_file):
    assert app.load_plan(str(plan_file)) is True
    assert app.plan_loaded
    assert len(app.weeks) == 3
    assert app.config.get_plan_path() == str(plan_file)


def test_load_missing_plan(app, tmp_path, capsys):
    assert app.load_plan(str(tmp_path / 'missing.csv')) is False
    assert not app.plan_loaded
    assert '✗ Error loading plan' in capsys.readouterr().out


def test_load_malformed_plan(app, tmp_path):
    path = tmp_path / 'broken.csv'
    path.write_text('a,"b\n')
    assert app.load_plan(str(path)) is False


def test_edit_and_save_touches_only_edited_cells(app, plan_file, shifted_grid):
    app.load_plan(str(plan_file))

    week = with_notes(record_actual_mileage(app.weeks[2], 40), notes='Hilly')
    assert app.apply_week_edit(2, week) is True
    assert app.unsaved_changes
    assert app.weeks[2].actual_mileage == 40
    assert app.weeks[2].difference == -1.0

    assert app.save_plan() is True
    assert not app.unsaved_changes

    saved = parse_raw_csv(plan_file.read_text())
    for index, row in enumerate(saved):
        if index != 12:
            assert row == shifted_grid[index]
    assert saved[12][12] == '40'
    assert saved[12][13] == '-1'
    assert saved[12][14] == 'Hilly'
    assert saved[12][7] == ' for Q1'
    assert saved[12][10] == ' for Q2'


def test_apply_out_of_range_edit(app, plan_file):
    app.load_plan(str(plan_file))
    assert app.apply_week_edit(99, app.weeks[0]) is False
    assert not app.unsaved_changes


def test_save_without_plan(app, capsys):
    assert app.save_plan() is False
    assert 'No plan loaded' in capsys.readouterr().out


def test_save_error_is_reported_and_edits_kept(app, plan_file, monkeypatch, capsys):
    app.load_plan(str(plan_file))
    app.apply_week_edit(0, with_notes(app.weeks[0], notes='Easy week'))

    def fail_save(grid, backup=False):
        raise UnicodeEncodeError('cp1252', '\U0001F3C3', 0, 1, 'character maps to <undefined>')

    monkeypatch.setattr(app.source, 'save_grid', fail_save)

    assert app.save_plan() is False
    assert 'Failed to save plan' in capsys.readouterr().out
    assert app.unsaved_changes
    assert app.weeks[0].notes == 'Easy week'


def test_main_rejects_unknown_log_level(capsys):
    with pytest.raises(SystemExit) as excinfo:
        plan_editor.main(['--log-level', 'chatty'])
    assert excinfo.value.code == 2
    assert 'invalid choice' in capsys.readouterr().err


def test_run_logs_mileage_and_saves(app, plan_file, monkeypatch):
    answers = iter(['3', '1', '50', '6', '8'])
    monkeypatch.setattr('builtins.input', lambda prompt='': next(answers))

    app.run(plan_path=str(plan_file))

    weeks = app.weeks
    assert weeks[0].actual_mileage == 50
    assert weeks[0].difference == 1.0
    assert parse_raw_csv(plan_file.read_text())[10][12] == '50'
    assert plan_file.with_name('plan.csv.bak').exists()


def test_run_edit_notes_then_discard_on_exit(app, plan_file, monkeypatch):
    original = plan_file.read_bytes()
    answers = iter(['4', '2', '2', 'Windy', '8', 'n'])
    monkeypatch.setattr('builtins.input', lambda prompt='': next(answers))

    app.run(plan_path=str(plan_file))

    assert app.weeks[1].q1.notes == 'Windy'
    assert app.unsaved_changes
    assert plan_file.read_bytes() == original
