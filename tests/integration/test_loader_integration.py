"""End-to-end loading from directory and archive bundles."""
import zipfile
from unittest.mock import MagicMock

from nativelib.extractors import ContextExtractor, SharedExtractor
from nativelib.loader import NativeLoader
from nativelib.resources import ResourceBundle
from nativelib.schemas import SystemSignals

LINUX_64 = SystemSignals(os_name="Linux", arch="x86_64", data_model="64", vm_bitmode="64")
OSX_64 = SystemSignals(os_name="Mac OS X", arch="x86_64", data_model="64")


def test_load_from_wheel(config, tmp_path):
    archive = tmp_path / "natives-1.0-py3-none-any.whl"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("natives/linux-x86_64-64/libdummy.so", b"native-lib-loader")

    load = MagicMock(return_value="handle")
    loader = NativeLoader(
        bundle=ResourceBundle.from_paths(archive),
        config=config,
        signals=LINUX_64,
        load_function=load,
    )

    assert loader.stage_and_load("dummy") is True
    assert load.call_args[0][0].read_bytes() == b"native-lib-loader"


def test_legacy_osx_bundle(config, make_bundle):
    root = make_bundle({"osx_64/libdummy.jnilib": b"legacy"})
    load = MagicMock()
    loader = NativeLoader(
        bundle=ResourceBundle.from_paths(root),
        config=config,
        signals=OSX_64,
        load_function=load,
    )

    assert loader.stage_and_load("dummy") is True
    assert load.call_args[0][0].name == "libdummy.jnilib"


def test_contexts_load_separate_copies(config, make_bundle):
    bundle = ResourceBundle.from_paths(make_bundle({"natives/linux_64/libdummy.so": b"shared"}))
    loaded = []
    for name in ("first", "second"):
        loader = NativeLoader(
            extractor=ContextExtractor(name, bundle=bundle, config=config),
            config=config,
            signals=LINUX_64,
            load_function=loaded.append,
        )
        assert loader.stage_and_load("dummy") is True

    assert loaded[0] != loaded[1]
    assert loaded[0].read_bytes() == loaded[1].read_bytes() == b"shared"


def test_next_run_cleans_previous_staging(config, make_bundle):
    bundle = ResourceBundle.from_paths(make_bundle({"natives/linux_64/libdummy.so": b"x"}))
    no_age = config.model_copy(update={"leftover_min_age_ms": 0})

    first = NativeLoader(
        extractor=SharedExtractor(bundle=bundle, config=no_age),
        config=no_age,
        signals=LINUX_64,
        load_function=MagicMock(),
    )
    path = first.stage("dummy")

    SharedExtractor(bundle=bundle, config=no_age)

    assert not path.exists()
