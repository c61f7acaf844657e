"""Tests for the groupby CLI command."""

import json

from click.testing import CliRunner

from groupby.cli.main import build_options, groupby_command, parse_capture_group
from groupby.models import CounterGrouping, RegexGrouping, SeparatorKind
from helpers import SHELL


FRUIT = b'banana\napple\navocado\n'
COURSES = b'ecs440 class notes.tex\necs450 class notes.tex\necs450 study guide.pdf\n'


class TestGroupbyCommand:
    """Test groupby CLI command."""

    def setup_method(self):
        self.runner = CliRunner()

    def invoke(self, args, data=FRUIT, env=None):
        return self.runner.invoke(groupby_command, args, input=data, env=env)

    def test_first_chars(self):
        result = self.invoke(['-f', '1'])
        assert result.exit_code == 0
        assert result.output == 'a:\napple\navocado\nb:\nbanana\n'

    def test_last_chars(self):
        result = self.invoke(['-l', '1'])
        assert result.exit_code == 0
        assert result.output == 'a:\nbanana\ne:\napple\no:\navocado\n'

    def test_words(self):
        result = self.invoke(['-w', '-f', '1', '--only-group-names'], data=b'big  brown\tbear ate\n')
        assert result.exit_code == 0
        assert result.output == 'a\nb\n'

    def test_regex_with_capture_group(self):
        result = self.invoke(['-r', r'(\w+)\.(\w+)$', '--capture-group', '2', '--only-group-names'], data=COURSES)
        assert result.exit_code == 0
        assert result.output == 'pdf\ntex\n'

    def test_extension(self):
        data = b'a.tar.gz\nb.gz\n.bashrc\nGemfile\n'
        result = self.invoke(['--extension'], data=data)
        assert result.exit_code == 0
        assert result.output == ':\n.bashrc\nGemfile\ngz:\na.tar.gz\nb.gz\n'

    def test_counter(self):
        result = self.invoke(['--counter', '--only-group-names'])
        assert result.exit_code == 0
        assert result.output == '0\n1\n2\n'

    def test_null_input_and_print0(self):
        result = self.invoke(['-0', '-f', '1', '--print0', '--only-group-names'], data=b'apple\x00banana\x00')
        assert result.exit_code == 0
        assert result.stdout_bytes == b'a\x00b\x00'

    def test_custom_split(self):
        result = self.invoke(['--split', ', ', '-f', '1', '--printspace'], data=b'apple, banana, avocado')
        assert result.exit_code == 0
        assert result.output == 'a: apple avocado b: banana '

    def test_stats(self):
        result = self.invoke(['-f', '1', '--stats'])
        assert result.exit_code == 0
        assert 'a: (2 items)' in result.output
        assert 'b: (1 item)' in result.output
        assert 'Total groups: 2' in result.output

    def test_json(self):
        result = self.invoke(['-f', '1', '--json', '--stats'])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data['groups'] == {'a': ['apple', 'avocado'], 'b': ['banana']}
        assert data['results'] is None
        assert data['statistics']['total_items'] == 3

    def test_run_command(self):
        result = self.invoke(['-f', '6', '-c', 'wc -l'], data=COURSES, env={'SHELL': SHELL})
        assert result.exit_code == 0
        lines = [line.strip() for line in result.output.split('\n')]
        assert lines == ['ecs440:', '1', '', 'ecs450:', '2', '', '']

    def test_run_command_sequential(self):
        result = self.invoke(['-f', '6', '-c', 'wc -l', '--sequential'], data=COURSES, env={'SHELL': SHELL})
        assert result.exit_code == 0
        lines = [line.strip() for line in result.output.split('\n')]
        assert lines == ['ecs440:', '1', '', 'ecs450:', '2', '', '']

    def test_run_command_json(self):
        result = self.invoke(['-f', '1', '-c', 'tr a-z A-Z', '--json'], env={'SHELL': SHELL})
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data['results'] == {'a': 'APPLE\nAVOCADO\n', 'b': 'BANANA\n'}

    def test_run_command_only_group_names(self):
        result = self.invoke(['-f', '1', '-c', 'cat', '--only-group-names'], env={'SHELL': SHELL})
        assert result.exit_code == 0
        assert result.output == 'a:\na\n\nb:\nb\n\n'

    def test_missing_shell(self):
        result = self.invoke(['-f', '1', '-c', 'cat'], env={'SHELL': None})
        assert result.exit_code == 1
        assert 'SHELL' in result.output

    def test_missing_shell_ignored_without_command(self):
        result = self.invoke(['-f', '1'], env={'SHELL': None})
        assert result.exit_code == 0

    def test_invalid_regex(self):
        result = self.invoke(['-r', '(unclosed'])
        assert result.exit_code == 1
        assert 'Invalid regex pattern' in result.output

    def test_invalid_capture_group(self):
        result = self.invoke(['-r', r'(\w+)', '--capture-group', 'missing'])
        assert result.exit_code == 1
        assert 'missing' in result.output

    def test_invalid_utf8(self):
        result = self.invoke(['-f', '1'], data=b'ok\n\xff\xfe\n')
        assert result.exit_code == 1
        assert 'UTF-8' in result.output

    def test_invalid_number(self):
        result = self.invoke(['-f', 'ten'])
        assert result.exit_code == 2

    def test_grouper_required(self):
        result = self.invoke([])
        assert result.exit_code == 2
        assert 'exactly one grouper' in result.output

    def test_only_one_grouper(self):
        result = self.invoke(['-f', '1', '--counter'])
        assert result.exit_code == 2

    def test_only_one_input_separator(self):
        result = self.invoke(['-w', '-0', '-f', '1'])
        assert result.exit_code == 2

    def test_only_one_output_separator(self):
        result = self.invoke(['-f', '1', '--print0', '--printspace'])
        assert result.exit_code == 2

    def test_capture_group_requires_regex(self):
        result = self.invoke(['-f', '1', '--capture-group', '1'])
        assert result.exit_code == 2

    def test_version(self):
        result = self.invoke(['--version'])
        assert result.exit_code == 0
        assert 'groupby' in result.output


class TestBuildOptions:
    """Tests for build_options and parse_capture_group"""

    def test_parse_capture_group(self):
        assert parse_capture_group(None) is None
        assert parse_capture_group('2') == 2
        assert parse_capture_group('name') == 'name'

    def test_defaults(self):
        options = build_options(
            False, False, None, None, None, None, False, True, None, False, False, False, None, False, False
        )
        assert options.grouping == CounterGrouping()
        assert options.input.separator.kind == SeparatorKind.LINE
        assert options.output.separator.kind == SeparatorKind.LINE
        assert options.output.run_command is None

    def test_regex(self):
        options = build_options(
            False, True, None, None, None, 'a(b)', False, False, '0', True, False, True, 'cat', True, True
        )
        assert options.grouping == RegexGrouping(pattern='a(b)', capture_group=0)
        assert options.input.separator.kind == SeparatorKind.NULL
        assert options.output.separator.kind == SeparatorKind.NULL
        assert options.output.only_group_names
        assert options.output.sequential
        assert options.output.stats
