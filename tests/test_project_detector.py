"""
Unit Tests — Project Detector
=============================
Build-system detection from marker files and the filesystem project service.
"""
from infer_bridge.executor.project_detector import (
    FilesystemProjectService,
    build_system_from_project_type,
    detect_build_system,
)
from infer_bridge.models.run_context import BuildSystem


class TestDetectBuildSystem:

    def test_detect_maven_from_pom(self, tmp_path):
        (tmp_path / "pom.xml").write_text("<project/>\n")
        assert detect_build_system(str(tmp_path)) == BuildSystem.MAVEN

    def test_detect_gradle_from_build_file(self, tmp_path):
        (tmp_path / "build.gradle").write_text("apply plugin: 'java'\n")
        assert detect_build_system(str(tmp_path)) == BuildSystem.GRADLE

    def test_detect_gradle_from_kotlin_dsl(self, tmp_path):
        (tmp_path / "build.gradle.kts").write_text("plugins { java }\n")
        assert detect_build_system(str(tmp_path)) == BuildSystem.GRADLE

    def test_detect_gradle_from_wrapper(self, tmp_path):
        (tmp_path / "gradlew").write_text("#!/bin/sh\n")
        assert detect_build_system(str(tmp_path)) == BuildSystem.GRADLE

    def test_priority_maven_over_gradle(self, tmp_path):
        (tmp_path / "pom.xml").write_text("<project/>\n")
        (tmp_path / "gradlew").write_text("#!/bin/sh\n")
        assert detect_build_system(str(tmp_path)) == BuildSystem.MAVEN

    def test_none_for_empty_dir(self, tmp_path):
        assert detect_build_system(str(tmp_path)) == BuildSystem.NONE

    def test_none_for_nonexistent_dir(self):
        assert detect_build_system("/nonexistent/path/xyz") == BuildSystem.NONE

    def test_directory_named_like_marker_ignored(self, tmp_path):
        (tmp_path / "pom.xml").mkdir()
        assert detect_build_system(str(tmp_path)) == BuildSystem.NONE


class TestProjectTypeMapping:

    def test_known_types(self):
        assert build_system_from_project_type("maven") == BuildSystem.MAVEN
        assert build_system_from_project_type("Gradle") == BuildSystem.GRADLE

    def test_unknown_types(self):
        assert build_system_from_project_type("unknown") == BuildSystem.NONE
        assert build_system_from_project_type("bazel") == BuildSystem.NONE
        assert build_system_from_project_type(None) == BuildSystem.NONE


class TestFilesystemProjectService:

    def test_root_and_type(self, tmp_path):
        (tmp_path / "pom.xml").write_text("<project/>\n")
        service = FilesystemProjectService(str(tmp_path))
        assert service.get_root_path() == str(tmp_path)
        assert service.get_project_type() == "maven"

    def test_unknown_type(self, tmp_path):
        assert FilesystemProjectService(str(tmp_path)).get_project_type() == "unknown"

    def test_no_root(self):
        service = FilesystemProjectService(None)
        assert service.get_root_path() is None
        assert service.get_project_type() == "unknown"

    def test_detection_cached(self, tmp_path):
        service = FilesystemProjectService(str(tmp_path))
        assert service.get_project_type() == "unknown"
        (tmp_path / "pom.xml").write_text("<project/>\n")
        assert service.get_project_type() == "unknown"
