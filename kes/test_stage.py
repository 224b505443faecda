"""
Tests for stage.yml resolution
"""

import pytest
import yaml

from kes.errors import MalformedDocumentError
from kes.stage import merge_stage, resolve_stage


def create_stage_file(content, temp_dir, name='stage.yml'):
    """Write a stage file for testing"""
    path = temp_dir / name
    if isinstance(content, str):
        path.write_text(content)
    else:
        path.write_text(yaml.dump(content))
    return str(path)


STAGES = {
    'default': {'a': 1, 'b': 2},
    'x': {'b': 3, 'c': 4},
}


def test_selected_stage_overrides_default(tmp_path):
    stage_file = create_stage_file(STAGES, tmp_path)

    assert resolve_stage(stage_file, {}, 'x') == {'a': 1, 'b': 3, 'c': 4}


def test_no_stage_returns_default(tmp_path):
    stage_file = create_stage_file(STAGES, tmp_path)

    assert resolve_stage(stage_file, {}, None) == {'a': 1, 'b': 2}


def test_unknown_stage_falls_back_to_default():
    assert merge_stage(STAGES, 'production') == {'a': 1, 'b': 2}


def test_merge_does_not_touch_document():
    merge_stage(STAGES, 'x')

    assert STAGES['default'] == {'a': 1, 'b': 2}


def test_missing_stage_file_is_skipped(tmp_path):
    assert resolve_stage(str(tmp_path / 'missing.yml'), {}, 'x') == {}
    assert resolve_stage(None, {}, 'x') == {}


def test_stage_file_is_rendered_with_envs(tmp_path):
    stage_file = create_stage_file(
        "default:\n  bucket: '{{BUCKET}}'\n  secret: '{{SECRET}}'\n", tmp_path
    )

    variables = resolve_stage(stage_file, {'BUCKET': 'my-bucket', 'SECRET': 'a&b<c>'})

    assert variables == {'bucket': 'my-bucket', 'secret': 'a&b<c>'}


def test_stage_file_includes(tmp_path):
    create_stage_file({'vpc': 'vpc-123', 'subnets': ['a', 'b']}, tmp_path, 'network.yml')
    stage_file = create_stage_file(
        "default:\n  name: test\nstaging:\n  network: !include network.yml\n", tmp_path
    )

    variables = resolve_stage(stage_file, {}, 'staging')

    assert variables['name'] == 'test'
    assert variables['network'] == {'vpc': 'vpc-123', 'subnets': ['a', 'b']}


def test_malformed_stage_file(tmp_path):
    stage_file = create_stage_file("default:\n  a: [1, 2\n", tmp_path)

    with pytest.raises(MalformedDocumentError) as excinfo:
        resolve_stage(stage_file, {})

    assert excinfo.value.phase == 'stage'
    assert stage_file in str(excinfo.value)


def test_stage_section_must_be_a_mapping(tmp_path):
    stage_file = create_stage_file("default:\n  a: 1\nx: just-a-string\n", tmp_path)

    with pytest.raises(MalformedDocumentError) as excinfo:
        resolve_stage(stage_file, {}, 'x')

    assert excinfo.value.phase == 'stage'
    assert 'x must be a mapping' in str(excinfo.value)
