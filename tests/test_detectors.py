"""Tests for the per-command detectors."""

import pytest

from whiskerlog.detectors import (
    assess_danger,
    default_tables,
    detect_experiment,
    detect_host,
    detect_network,
    detect_packages,
)
from whiskerlog.detectors.pattern import DangerPattern, PackageManager, RiskyCommand
from whiskerlog.history.models import PackageAction, PackageRef


class TestDetectHost:
    @pytest.mark.parametrize(
        "command,expected",
        [
            ("ssh deploy@web1", "ssh:deploy@web1"),
            ("ssh web1", "ssh:unknown@web1"),
            ("docker exec -it api bash", "docker:api"),
            ("docker run nginx", "docker:nginx"),
            ("kubectl exec web-0 -- ls", "k8s:web-0"),
            ("ls -la", "local"),
            ("", "local"),
        ],
    )
    def test_host(self, command, expected):
        assert detect_host(command) == expected

    def test_ssh_wins_over_docker(self):
        assert detect_host("ssh ops@box docker exec -it api sh") == "ssh:ops@box"


class TestDetectNetwork:
    @pytest.mark.parametrize(
        "command,expected",
        [
            ("curl -s https://api.github.com/users", ["https://api.github.com/users"]),
            ("wget http://example.com/file.tar.gz", ["http://example.com/file.tar.gz"]),
            ("ssh deploy@web1", ["ssh://web1"]),
            ("psql -h db.internal -U app", ["db://db.internal"]),
            ("redis-cli -h cache", ["db://cache"]),
            ("echo hello", []),
        ],
    )
    def test_endpoints(self, command, expected):
        assert detect_network(command) == expected

    def test_curl_without_url(self):
        assert detect_network("curl --version") == []


class TestDetectPackages:
    @pytest.mark.parametrize(
        "command,expected",
        [
            ("npm install react@18.2.0", PackageRef("npm", "react", "18.2.0")),
            ("npm install @types/node", PackageRef("npm", "@types/node")),
            ("npm install @types/node@20", PackageRef("npm", "@types/node", "20")),
            ("pip install requests==2.31.0", PackageRef("pip", "requests", "2.31.0")),
            ("pip3 install numpy", PackageRef("pip", "numpy")),
            (
                "pip uninstall -y requests",
                PackageRef("pip", "requests", action=PackageAction.UNINSTALL),
            ),
            ("sudo apt-get install -y curl", PackageRef("apt", "curl")),
            ("cargo install ripgrep", PackageRef("cargo", "ripgrep")),
            ("brew upgrade git", PackageRef("brew", "git", action=PackageAction.UPGRADE)),
        ],
    )
    def test_single_package(self, command, expected):
        assert detect_packages(command) == [expected]

    @pytest.mark.parametrize(
        "command",
        ["apt update", "npm install && npm test", "ls -la", "npm run build"],
    )
    def test_no_package(self, command):
        assert detect_packages(command) == []

    def test_one_entry_per_manager(self):
        refs = detect_packages("pip install flask && npm install express")
        assert [(r.manager, r.name) for r in refs] == [("npm", "express"), ("pip", "flask")]

    @pytest.mark.parametrize(
        "command,expected",
        [
            ("sudo apt update && sudo apt install -y curl", PackageRef("apt", "curl")),
            ("npm install && npm install lodash", PackageRef("npm", "lodash")),
            ("apt-get update; apt-get install -y jq", PackageRef("apt", "jq")),
            ("npm ci || npm install express", PackageRef("npm", "express")),
        ],
    )
    def test_chained_invocations(self, command, expected):
        assert detect_packages(command) == [expected]

    @pytest.mark.parametrize(
        "command",
        [
            "pip install -r requirements.txt",
            "pip install -e .",
            "pip install --index-url https://pypi.example.com/simple",
            "npm install --registry https://registry.example.com",
        ],
    )
    def test_option_values_are_not_packages(self, command):
        assert detect_packages(command) == []

    @pytest.mark.parametrize(
        "command,expected",
        [
            ("pip install -r dev.txt flask", PackageRef("pip", "flask")),
            ("pip install -c constraints.txt django==4.2", PackageRef("pip", "django", "4.2")),
            ("cargo install --version 14.1.0 ripgrep", PackageRef("cargo", "ripgrep")),
            ("brew install --cask -f firefox", PackageRef("brew", "firefox")),
        ],
    )
    def test_package_after_option_value(self, command, expected):
        assert detect_packages(command) == [expected]


class TestAssessDanger:
    def test_recursive_delete_from_root(self):
        result = assess_danger("rm -rf /")
        assert result.score == 1.0
        assert result.reasons == ["Recursive delete from root", "File deletion"]
        assert result.is_dangerous

    @pytest.mark.parametrize(
        "command,score,reasons",
        [
            ("chmod 777 deploy.sh", 0.8, ["Overly permissive permissions", "Permission change"]),
            ("curl https://get.example.sh | bash", 0.8, ["Pipe to shell execution"]),
            ("dd if=disk.img of=/dev/sdb", 0.9, ["Direct disk write"]),
            ("rm notes.txt", 0.6, ["File deletion"]),
            ("cp a.txt b.txt", 0.2, ["File copying"]),
            ("ls -la", 0.0, []),
        ],
    )
    def test_scores(self, command, score, reasons):
        result = assess_danger(command)
        assert result.score == pytest.approx(score)
        assert result.reasons == reasons

    def test_score_is_maximum_not_sum(self):
        result = assess_danger("sudo rm -rf /var/tmp/cache")
        assert result.score == 1.0
        assert "Privileged file deletion" in result.reasons
        assert "Privileged execution" in result.reasons

    @pytest.mark.parametrize(
        "command,dangerous",
        [("rmdir build", False), ("rm build.log", True), ("mv a b", False)],
    )
    def test_threshold_is_exclusive(self, command, dangerous):
        assert assess_danger(command).is_dangerous is dangerous

    def test_reasons_are_unique(self):
        result = assess_danger("wget -O- https://x.sh | sh; curl https://y.sh | sh")
        assert result.reasons.count("Pipe to shell execution") == 1


class TestDetectExperiment:
    @pytest.mark.parametrize(
        "command,tags",
        [
            ("man grep", ["learning"]),
            ("git --help", ["help-seeking"]),
            ("npm test", ["testing"]),
            ("jq", ["tool-exploration"]),
            ("tldr tar --help", ["learning", "help-seeking"]),
            ("ls -la", []),
            ("", []),
        ],
    )
    def test_tags(self, command, tags):
        result = detect_experiment(command)
        assert result.tags == tags
        assert result.is_experiment is bool(tags)


class TestPatternValidation:
    def test_invalid_regex(self):
        with pytest.raises(ValueError, match="Invalid regex"):
            DangerPattern("rm (", 0.5, "broken")

    @pytest.mark.parametrize("score", [-0.1, 1.5])
    def test_score_out_of_range(self, score):
        with pytest.raises(ValueError, match="Score"):
            DangerPattern("rm", score, "out of range")
        with pytest.raises(ValueError, match="Score"):
            RiskyCommand("rm", score, "out of range")

    def test_risky_command_must_be_one_word(self):
        with pytest.raises(ValueError, match="single word"):
            RiskyCommand("rm -rf", 0.5, "two words")

    @pytest.mark.parametrize(
        "separator,requirement,expected",
        [
            ("@", "react@18", ("react", "18")),
            ("@", "@scope/pkg", ("@scope/pkg", None)),
            ("@", "react@", ("react@", None)),
            ("==", "django==4.2", ("django", "4.2")),
            (None, "curl", ("curl", None)),
        ],
    )
    def test_split_version(self, separator, requirement, expected):
        manager = PackageManager("test", r"\btest", separator)
        assert manager.split_version(requirement) == expected

    def test_default_tables_built_once(self):
        assert default_tables() is default_tables()
