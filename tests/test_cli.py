import pytest
from click.testing import CliRunner

from phrase_stories.cli import cli
from phrase_stories.config import Config
from phrase_stories.orchestrator import StoryOrchestrator
from phrase_stories.storage import SETTINGS_KEY, LocalStore

from conftest import FakeOpenAI, phrases_json


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(f"""
storage:
  state_dir: {tmp_path / "state"}
  cache_dir: {tmp_path / "cache"}
polling:
  interval_seconds: 0.001
  max_attempts: 5
""")
    return config_file


@pytest.fixture
def orchestrator(config_file):
    client = FakeOpenAI(replies=["arc", phrases_json("小猫", "很可爱。", "它", "睡觉了。"), phrases_json("再见。")])
    return StoryOrchestrator(Config.from_yaml(config_file), client=client)


def test_cli_help(runner):
    result = runner.invoke(cli, ['--help'])
    assert result.exit_code == 0
    for command in ('generate', 'continue', 'resume', 'detail', 'speak', 'settings'):
        assert command in result.output


def test_settings_command(runner, config_file, tmp_path):
    result = runner.invoke(cli, [
        '-c', str(config_file), 'settings',
        '--language', 'ja', '--level', 'Beginner - A1', '--genre', 'Mystery', '--genre', 'Comedy',
    ])
    assert result.exit_code == 0
    assert 'Japanese' in result.output

    saved = LocalStore(tmp_path / "state").load(SETTINGS_KEY)
    assert saved['selected_language']['id'] == 'ja'
    assert saved['language_level'] == 'Beginner - A1'
    assert saved['selected_genres'] == ['Mystery', 'Comedy']

    result = runner.invoke(cli, ['-c', str(config_file), 'settings'])
    assert 'Beginner - A1' in result.output


def test_settings_rejects_unknown_level(runner, config_file):
    result = runner.invoke(cli, ['-c', str(config_file), 'settings', '--level', 'Expert'])
    assert result.exit_code != 0


def test_show_without_story(runner, config_file):
    result = runner.invoke(cli, ['-c', str(config_file), 'show'])
    assert result.exit_code == 1
    assert "No saved story" in result.output


def test_generate_then_continue(runner, config_file, orchestrator):
    result = runner.invoke(cli, ['-c', str(config_file), 'generate'], obj={'orchestrator': orchestrator})
    assert result.exit_code == 0
    assert 'e-小猫' in result.output

    result = runner.invoke(cli, ['-c', str(config_file), 'continue'], obj={'orchestrator': orchestrator})
    assert result.exit_code == 0
    assert orchestrator.phrases.next_index == 5


def test_saved_story_commands(runner, config_file, orchestrator):
    assert orchestrator.generate()

    result = runner.invoke(cli, ['-c', str(config_file), 'show'])
    assert result.exit_code == 0
    assert '很可爱。' in result.output

    result = runner.invoke(cli, ['-c', str(config_file), 'sentence', '3'])
    assert result.exit_code == 0
    assert '它~[睡觉了。]' in result.output

    result = runner.invoke(cli, ['-c', str(config_file), 'click', '3'])
    assert result.exit_code == 0
    assert 'Sentence 1' in result.output

    result = runner.invoke(cli, ['-c', str(config_file), 'sentence', '42'])
    assert result.exit_code == 1
    assert 'No phrase with index 42' in result.output


def test_detail_command(runner, config_file, orchestrator):
    orchestrator.generate()
    result = runner.invoke(cli, ['-c', str(config_file), 'detail', '0'], obj={'orchestrator': orchestrator})
    assert result.exit_code == 0
    assert 'DETAIL for Phrase: 小猫' in result.output


def test_clicks_command(runner, config_file, orchestrator):
    orchestrator.generate()
    orchestrator.engagement.record_click("猫")
    orchestrator.engagement.commit_pending(decay=False)

    result = runner.invoke(cli, ['-c', str(config_file), 'clicks'])
    assert result.exit_code == 0
    assert '猫' in result.output

    result = runner.invoke(cli, ['-c', str(config_file), 'clicks', '--reset'])
    assert result.exit_code == 0
    assert 'reset' in result.output
