"""
Tests for the kes command line
"""

import yaml

from kes.cli import build_parser, main, resolve_paths


def make_kes_folder(temp_dir, config, template="Description: '{{stackName}}'\n", stage=None):
    folder = temp_dir / '.kes'
    folder.mkdir()
    (folder / 'config.yml').write_text(config)
    (folder / 'cloudformation.template.yml').write_text(template)
    if stage is not None:
        (folder / 'stage.yml').write_text(stage)
    return folder


def test_default_paths_live_in_kes_folder():
    args = build_parser().parse_args(['cf', 'compile', '-k', 'deploy'])

    paths = resolve_paths(args)

    assert paths['config'] == 'deploy/config.yml'
    assert paths['stage'] == 'deploy/stage.yml'
    assert paths['env'] == 'deploy/.env'
    assert paths['cf'] == 'deploy/cloudformation.template.yml'
    assert paths['output'] == 'deploy/cloudformation.yml'


def test_explicit_paths_win():
    args = build_parser().parse_args(['config', '-c', 'other.yml', '--deployment', 'prod'])

    assert resolve_paths(args)['config'] == 'other.yml'
    assert args.stage == 'prod'


def test_compile_command(tmp_path):
    folder = make_kes_folder(
        tmp_path,
        "stackName: '{{name}}'\n",
        stage="default:\n  name: from-default\nprod:\n  name: from-prod\n",
    )

    assert main(['cf', 'compile', '-k', str(folder), '-d', 'prod']) == 0

    compiled = yaml.safe_load((folder / 'cloudformation.yml').read_text())
    assert compiled == {'Description': 'from-prod'}


def test_config_command(tmp_path, capsys):
    folder = make_kes_folder(tmp_path, "stackName: mystack\n")
    (folder / '.env').write_text("SECRET=value\n")

    assert main(['config', '-k', str(folder), '--stack', 'override']) == 0

    printed = yaml.safe_load(capsys.readouterr().out)
    assert printed['stackName'] == 'override'


def test_errors_exit_with_status_1(tmp_path):
    folder = make_kes_folder(
        tmp_path,
        "stackName: s\napis:\n  - name: Other\nlambdas:\n"
        "  - name: a\n    handler: h\n    source: s\n"
        "    apiGateway:\n      - api: Missing\n        path: /items\n        method: get\n",
    )

    assert main(['cf', 'compile', '-k', str(folder)]) == 1
    assert not (folder / 'cloudformation.yml').exists()


def test_missing_config_exits_with_status_1(tmp_path):
    assert main(['config', '-k', str(tmp_path / 'nowhere')]) == 1
