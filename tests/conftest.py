"""
Pytest configuration and fixtures for image set engine tests.
"""
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import pydicom
from pydicom.dataset import FileDataset, FileMetaDataset
from pydicom.uid import ExplicitVRLittleEndian
from PIL import Image

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from imageset_core.config import EngineConfig  # noqa: E402


def write_minimal_dicom(path: str, modality: str = "MG") -> str:
    """
    Write a minimal valid DICOM file (1x1 pixel, 8-bit).

    Used for catalogs whose images are stored as DICOM.

    Args:
        path: File path to write the DICOM to
        modality: DICOM modality string (default: MG)

    Returns:
        str: The path that was written to (same as input)
    """
    meta = FileMetaDataset()
    meta.MediaStorageSOPClassUID = pydicom.uid.SecondaryCaptureImageStorage
    meta.MediaStorageSOPInstanceUID = pydicom.uid.generate_uid()
    meta.TransferSyntaxUID = ExplicitVRLittleEndian

    ds = FileDataset(
        path,
        {},
        file_meta=meta,
        preamble=b"\x00" * 128
    )

    ds.PatientName = "Test^Synthetic"
    ds.PatientID = "TEST_CATALOG"
    ds.SOPClassUID = meta.MediaStorageSOPClassUID
    ds.SOPInstanceUID = meta.MediaStorageSOPInstanceUID
    ds.StudyInstanceUID = pydicom.uid.generate_uid()
    ds.SeriesInstanceUID = pydicom.uid.generate_uid()
    ds.Modality = modality

    ds.Rows = 1
    ds.Columns = 1
    ds.PhotometricInterpretation = "MONOCHROME2"
    ds.SamplesPerPixel = 1
    ds.BitsAllocated = 8
    ds.BitsStored = 8
    ds.HighBit = 7
    ds.PixelRepresentation = 0
    ds.PixelData = b"\x00"

    ds.save_as(path, enforce_file_format=True)
    return path


def write_png(path: Path) -> Path:
    """Write a tiny grayscale PNG."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("L", (4, 4), color=128).save(path, format="PNG")
    return path


def make_set(set_id: str, tag: str = "normal", **fields: Any) -> Dict[str, Any]:
    """Build a manifest set record with all flags off by default."""
    record = {
        'id': set_id,
        'tag': tag,
        'hasImplants': False,
        'hasExtraImages': False,
        'hasRepeat': False,
    }
    record.update(fields)
    return record


def make_event(
    *,
    symptoms: Optional[List[Dict[str, Any]]] = None,
    implants: Optional[List[Dict[str, Any]]] = None,
    views: Optional[Dict[str, Dict[str, Any]]] = None,
    imperfect: Any = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Build an event record shaped like the host workflow's events."""
    event: Dict[str, Any] = {'id': 'evt_test', 'medicalInformation': {}}
    if symptoms is not None:
        event['medicalInformation']['symptoms'] = symptoms
    if implants is not None:
        event['medicalInformation']['medicalHistory'] = {'breastImplantsAugmentation': implants}

    if views is not None or imperfect is not None or metadata is not None:
        mammogram: Dict[str, Any] = {'views': views or {}}
        if imperfect is not None:
            mammogram['isImperfectButBestPossible'] = imperfect
        if metadata is not None:
            mammogram['metadata'] = metadata
        event['mammogramData'] = mammogram
    return event


def captured_view(short: str, count: int = 1, repeat_count: int = 0) -> Dict[str, Any]:
    return {'viewShortWithSide': short, 'count': count, 'repeatCount': repeat_count}


ALL_VIEWS_CAPTURED = {
    'rightCraniocaudal': captured_view('RCC'),
    'leftCraniocaudal': captured_view('LCC'),
    'rightMediolateralOblique': captured_view('RMLO'),
    'leftMediolateralOblique': captured_view('LMLO'),
}


def write_manifest(config: EngineConfig, source: str, sets: List[Dict[str, Any]]) -> Path:
    """Write a manifest.json for a source and return its path."""
    path = config.manifest_path(source)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({'sets': sets}), encoding="utf-8")
    return path


@pytest.fixture
def engine_config(tmp_path):
    """EngineConfig rooted at a fresh temporary assets directory."""
    return EngineConfig(assets_root=tmp_path / "images")


@pytest.fixture
def catalog(engine_config):
    """
    Returns a writer: catalog(sets, source='diagrams') -> EngineConfig.

    Writes the manifest and hands back the config to query it with.
    """
    def _write(sets: List[Dict[str, Any]], source: str = "diagrams") -> EngineConfig:
        write_manifest(engine_config, source, sets)
        return engine_config
    return _write


@pytest.fixture
def mixed_catalog(catalog):
    """
    A small catalog covering every tag plus flagged and disabled sets.
    """
    return catalog([
        make_set('normal-01', 'normal'),
        make_set('normal-02', 'normal'),
        make_set('abnormal-01', 'abnormal', right={'status': 'abnormal', 'finding': 'mass'}),
        make_set('abnormal-02', 'abnormal', left={'status': 'abnormal', 'finding': 'calcification'}),
        make_set('indeterminate-01', 'indeterminate'),
        make_set('technical-01', 'technical', right={'status': 'technical'}),
        make_set('implants-01', 'normal', hasImplants=True),
        make_set('disabled-01', 'normal', disabled=True),
    ])
