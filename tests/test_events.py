"""
Unit tests for events.py: selection + paths + the event's captured views.
"""

import pytest

from conftest import ALL_VIEWS_CAPTURED, captured_view, make_event, make_set
import imageset_core.events
import imageset_core.paths
import imageset_core.selection
from imageset_core.events import get_images_for_event
from imageset_core.manifest import load_manifest

PREFIX = "/images/mammogram-diagrams"

TWO_VIEWS = {
    'rightCraniocaudal': captured_view('RCC'),
    'leftCraniocaudal': captured_view('LCC'),
}


class TestCapturedViews:
    """Only views the event captured are returned."""

    def test_filters_to_captured_views(self, catalog):
        """Only the views the event captured are returned."""
        config = catalog([make_set('normal-01')])
        result = get_images_for_event("evt_1", 'diagrams', {'event': make_event(views=TWO_VIEWS)},
                                      config=config)
        assert set(result.paths) == {'rcc', 'lcc'}
        assert set(result.all_paths) == {'rcc', 'lcc'}
        assert result.paths['rcc'] == f"{PREFIX}/normal-01/rcc.png"

    def test_no_event_returns_all_views(self, catalog):
        """Without an event every view of the set is returned."""
        config = catalog([make_set('normal-01')])
        result = get_images_for_event("evt_1", 'diagrams', config=config)
        assert set(result.paths) == {'rcc', 'lcc', 'rmlo', 'lmlo'}
        assert result.has_additional_images is False

    def test_event_without_view_record_returns_all_views(self, catalog):
        """An event with no view record does not filter views."""
        config = catalog([make_set('normal-01')])
        event = make_event(symptoms=[{'type': 'Lump', 'location': 'left breast'}])
        result = get_images_for_event("evt_1", 'diagrams', {'event': event}, config=config)
        assert set(result.paths) == {'rcc', 'lcc', 'rmlo', 'lmlo'}

    def test_event_with_empty_view_record_returns_nothing(self, catalog):
        """An empty view record means nothing was captured."""
        config = catalog([make_set('normal-01')])
        event = make_event(views={})
        result = get_images_for_event("evt_1", 'diagrams', {'event': event}, config=config)
        assert result.paths == {}
        assert result.set.id == 'normal-01'


class TestRetakes:
    """Sequences collapse to the latest image in `paths`."""

    def repeat_catalog(self, catalog):
        return catalog([
            make_set('normal-01'),
            make_set('repeat-01', hasRepeat=True, views={
                'rcc': ['rcc-first.png', 'rcc-retake.png'],
                'lcc': 'lcc.png',
                'rmlo': 'rmlo.png',
                'lmlo': 'lmlo.png',
            }),
        ])

    def test_latest_and_full_sequence(self, catalog):
        """paths holds the latest retake, all_paths the whole sequence."""
        config = self.repeat_catalog(catalog)
        views = dict(ALL_VIEWS_CAPTURED)
        views['rightCraniocaudal'] = captured_view('RCC', count=2, repeat_count=1)
        event = make_event(views=views, metadata={'hasRepeat': True})

        result = get_images_for_event("evt_1", 'diagrams', {'event': event}, config=config)
        assert result.set.id == 'repeat-01'
        assert result.paths['rcc'] == f"{PREFIX}/library/rcc-retake.png"
        assert result.all_paths['rcc'] == [
            f"{PREFIX}/library/rcc-first.png",
            f"{PREFIX}/library/rcc-retake.png",
        ]
        assert result.all_paths['lcc'] == f"{PREFIX}/library/lcc.png"
        assert result.has_additional_images is True

    def test_sequence_outside_captured_views_does_not_count(self, catalog):
        """Retakes on views the event did not capture are ignored."""
        config = self.repeat_catalog(catalog)
        views = {'leftCraniocaudal': captured_view('LCC', count=2, repeat_count=1)}
        event = make_event(views=views)
        result = get_images_for_event("evt_1", 'diagrams', {'event': event}, config=config)
        assert result.set.id == 'repeat-01'
        assert set(result.paths) == {'lcc'}
        assert result.has_additional_images is False

    def test_event_flag_marks_additional_images(self, catalog):
        """The event's own hasAdditionalImages flag is honoured."""
        config = catalog([make_set('normal-01')])
        event = make_event(views=ALL_VIEWS_CAPTURED, metadata={'hasAdditionalImages': True})
        result = get_images_for_event("evt_1", 'diagrams', {'event': event}, config=config)
        assert result.has_additional_images is True


class TestEventImagesOutput:
    def test_to_dict(self, catalog):
        """JSON output uses the camelCase keys."""
        config = catalog([make_set('normal-01')])
        data = get_images_for_event("evt_1", 'diagrams', config=config).to_dict()
        assert data['set']['id'] == 'normal-01'
        assert set(data) == {'set', 'paths', 'allPaths', 'hasAdditionalImages'}

    def test_unavailable(self, engine_config):
        """A missing catalog gives None."""
        assert get_images_for_event("evt_1", 'diagrams', config=engine_config) is None

    @pytest.mark.parametrize("event", [[{'id': 'x'}], "evt_1", 42])
    def test_non_mapping_event_has_no_details(self, catalog, event):
        """An event that is not a mapping filters nothing and flags nothing."""
        config = catalog([make_set('normal-01')])
        result = get_images_for_event("evt_1", 'diagrams', {'event': event}, config=config)
        assert result.set.id == 'normal-01'
        assert set(result.paths) == {'rcc', 'lcc', 'rmlo', 'lmlo'}
        assert result.has_additional_images is False


class TestManifestReads:
    def test_manifest_read_once_per_query(self, catalog, monkeypatch):
        """Selection and path resolution share one manifest read."""
        config = catalog([make_set('normal-01'), make_set('abnormal-01', 'abnormal')])
        calls = []

        def counting_load(source, *, config=None):
            calls.append(source)
            return load_manifest(source, config=config)

        for module in (imageset_core.events, imageset_core.selection, imageset_core.paths):
            monkeypatch.setattr(module, 'load_manifest', counting_load)

        result = get_images_for_event("evt_1", 'diagrams', config=config)
        assert result is not None
        assert calls == ['diagrams']
