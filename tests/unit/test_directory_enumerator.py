"""Unit tests for recursive directory enumeration."""

import pytest

from routing_config_provider.errors import ConfigIOError
from routing_config_provider.provider.enumerator import list_directories_recursively


class TestListDirectoriesRecursively:
    """Test cases for list_directories_recursively."""

    def test_root_first_then_depth_first(self, temp_config_dir):
        (temp_config_dir / "a" / "x" / "deep").mkdir(parents=True)
        (temp_config_dir / "b").mkdir()
        (temp_config_dir / "routes.yaml").write_text("backends: {}\n")

        root = str(temp_config_dir)
        a = str(temp_config_dir / "a")
        x = str(temp_config_dir / "a" / "x")
        deep = str(temp_config_dir / "a" / "x" / "deep")
        b = str(temp_config_dir / "b")

        directories = list_directories_recursively(root)

        assert directories[0] == root
        assert sorted(directories) == sorted([root, a, x, deep, b])
        # a's whole subtree follows a directly
        start = directories.index(a)
        assert directories[start:start + 3] == [a, x, deep]

    def test_files_are_not_listed(self, temp_config_dir):
        (temp_config_dir / "one.yaml").write_text("")
        (temp_config_dir / "two.tmpl").write_text("")

        assert list_directories_recursively(str(temp_config_dir)) == [str(temp_config_dir)]

    def test_plain_file_root_yields_empty_list(self, temp_config_dir):
        config_file = temp_config_dir / "app.yaml"
        config_file.write_text("backends: {}\n")

        assert list_directories_recursively(str(config_file)) == []

    def test_missing_root_raises(self, temp_config_dir):
        missing = str(temp_config_dir / "missing")

        with pytest.raises(ConfigIOError) as exc_info:
            list_directories_recursively(missing)

        assert exc_info.value.path == missing
        assert "Unable to stat" in exc_info.value.message

    def test_trailing_separator_is_not_doubled(self, temp_config_dir):
        (temp_config_dir / "sub").mkdir()

        directories = list_directories_recursively(str(temp_config_dir) + "/")

        assert str(temp_config_dir / "sub") in directories

    def test_symlinked_directories_are_not_followed(self, temp_config_dir):
        (temp_config_dir / "sub").mkdir()
        (temp_config_dir / "sub" / "loop").symlink_to("..")
        (temp_config_dir / "linked").symlink_to(temp_config_dir / "sub")

        directories = list_directories_recursively(str(temp_config_dir))

        assert sorted(directories) == sorted([str(temp_config_dir), str(temp_config_dir / "sub")])
