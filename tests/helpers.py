"""
Test helpers — sample modpub.yml and project scaffolding.
"""

import textwrap
from pathlib import Path

SAMPLE_CONFIG = textwrap.dedent("""\
    module: org.acme:widget:1.0.0
    configurations:
      - name: compile
        description: Compile classpath
        artifacts:
          - build/lib.jar
        dependencies:
          - org.slf4j:slf4j-api:2.0.9
      - name: runtime
        extends: compile
        artifacts:
          - build/native.so
        dependencies:
          - module: org.acme:core:1.2
            conf: [default, sources]
            exclude: [commons-logging:commons-logging]
      - name: test
        extends: [runtime]
        visible: false
    publish:
      configurations: [runtime]
      descriptor: build/publications/descriptor.json
    targets:
      - name: local
        path: repo/local
      - name: shared
        path: repo/shared
""")


def write_project(root: Path, content: str = SAMPLE_CONFIG, artifacts: bool = True) -> Path:
    """Write modpub.yml (and the sample artifact files) under ``root``."""
    root.mkdir(parents=True, exist_ok=True)
    config = root / "modpub.yml"
    config.write_text(content)
    if artifacts:
        (root / "build").mkdir(exist_ok=True)
        (root / "build" / "lib.jar").write_bytes(b"jar-bytes")
        (root / "build" / "native.so").write_bytes(b"so-bytes")
    return config
