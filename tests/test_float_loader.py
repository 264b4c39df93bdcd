# tests/test_float_loader.py

from datetime import datetime

import numpy as np
import pytest

from bgcargo.data.float_loader import (_interpolate_positions, good_profile_values, load_float_data,
                                       trajectory_positions)

from conftest import create_sample_sprof


class TestLoadFloatData:
    """Test cases for loading float data from cached Sprof files"""

    def test_base_and_requested_variables(self, handle):
        data = load_float_data(handle, [1900722], ['DOXY'])

        float_data = data[1900722]
        for name in ['CYCLE_NUMBER', 'JULD', 'LATITUDE', 'LONGITUDE', 'POSITION_QC',
                     'DOXY', 'DOXY_QC', 'DOXY_ADJUSTED']:
            assert name in float_data
        # not present in the file
        assert 'DOXY_ADJUSTED_ERROR' not in float_data
        assert 'DIRECTION' not in float_data
        assert float_data['DOXY'].shape == (3, 20)
        assert float_data['DOXY_QC'].shape == (3, 20)

    def test_single_variable_string(self, handle):
        float_data = load_float_data(handle, [1900722], 'DOXY')[1900722]

        assert 'DOXY' in float_data
        assert 'DOXY_QC' in float_data
        assert 'D' not in float_data

    def test_missing_tracer_is_left_out(self, handle):
        data = load_float_data(handle, [1900722, 6901472], ['DOXY'])

        assert 'DOXY' in data[1900722]
        assert 'DOXY' not in data[6901472]

    def test_failed_floats_are_left_out(self, handle):
        data = load_float_data(handle, [1900722, 5904859], ['TEMP'])
        assert list(data) == [1900722]

    def test_profile_selection(self, handle):
        data = load_float_data(handle, [1900722], ['TEMP'], float_profs={1900722: [0, 2]})

        float_data = data[1900722]
        assert list(float_data['CYCLE_NUMBER']) == [1, 3]
        assert float_data['TEMP'].shape == (2, 20)

    def test_positions_are_interpolated(self, handle, archive):
        lon = np.array([170.0, np.nan, -170.0])
        lat = np.array([10.0, np.nan, 20.0])
        create_sample_sprof(archive / 'dac/aoml/5904859/5904859_Sprof.nc', 5904859,
                            positions=(lon, lat), position_qc=[b'1', b'9', b'1'])

        data = load_float_data(handle, [5904859])

        assert data[5904859]['LATITUDE'][1] == pytest.approx(15.0)
        assert abs(data[5904859]['LONGITUDE'][1]) == pytest.approx(180.0)

    def test_estimated_positions_are_replaced(self, handle, archive):
        lon = np.array([-150.0, -120.0, -148.0])
        lat = np.array([30.0, 50.0, 32.0])
        create_sample_sprof(archive / 'dac/aoml/5904859/5904859_Sprof.nc', 5904859,
                            positions=(lon, lat), position_qc=[b'1', b'8', b'1'])

        interpolated = load_float_data(handle, [5904859])[5904859]
        assert interpolated['LONGITUDE'][1] == pytest.approx(-149.0)
        assert interpolated['LATITUDE'][1] == pytest.approx(31.0)

        raw = load_float_data(handle, [5904859], interp_lonlat=False)[5904859]
        assert raw['LONGITUDE'][1] == pytest.approx(-120.0)
        assert 'POSITION_ESTIMATED' not in raw

        df = trajectory_positions({5904859: interpolated})
        assert list(df['ESTIMATED']) == [False, True, False]


class TestInterpolatePositions:
    """Test cases for filling positions between known fixes"""

    def test_east_longitudes_keep_their_range(self):
        float_data = {
            'JULD': np.array([0.0, 1.0, 2.0]),
            'LONGITUDE': np.array([200.0, np.nan, 202.0]),
            'LATITUDE': np.array([10.0, np.nan, 12.0]),
        }
        _interpolate_positions(float_data)

        np.testing.assert_allclose(float_data['LONGITUDE'], [200.0, 201.0, 202.0])
        np.testing.assert_allclose(float_data['LATITUDE'], [10.0, 11.0, 12.0])
        assert list(float_data['POSITION_ESTIMATED']) == [False, True, False]

    def test_east_longitudes_across_greenwich(self):
        float_data = {
            'JULD': np.array([0.0, 1.0, 2.0, 3.0]),
            'LONGITUDE': np.array([350.0, np.nan, np.nan, 2.0]),
            'LATITUDE': np.array([0.0, np.nan, np.nan, 3.0]),
        }
        _interpolate_positions(float_data)

        np.testing.assert_allclose(float_data['LONGITUDE'], [350.0, 354.0, 358.0, 2.0])

    def test_west_longitudes_keep_their_range(self):
        float_data = {
            'JULD': np.array([0.0, 1.0, 2.0]),
            'LONGITUDE': np.array([-10.0, np.nan, 2.0]),
            'LATITUDE': np.array([0.0, np.nan, 2.0]),
        }
        _interpolate_positions(float_data)

        assert float_data['LONGITUDE'][1] == pytest.approx(-4.0)

    def test_unbracketed_gap_is_left_alone(self):
        float_data = {
            'JULD': np.array([0.0, 1.0, 2.0]),
            'LONGITUDE': np.array([10.0, 11.0, np.nan]),
            'LATITUDE': np.array([0.0, 1.0, np.nan]),
        }
        _interpolate_positions(float_data)

        assert np.isnan(float_data['LONGITUDE'][2])
        assert 'POSITION_ESTIMATED' not in float_data


class TestTrajectoryPositions:
    """Test cases for building trajectory position tables"""

    def setup_method(self):
        self.data = {
            1900722: {
                'JULD': np.array([0.0, 10.0, 20.0]),
                'LONGITUDE': np.array([-150.0, -149.0, -148.0]),
                'LATITUDE': np.array([30.0, 31.0, 32.0]),
            },
            6901472: {
                'JULD': np.array([5.0]),
                'LONGITUDE': np.array([10.0]),
                'LATITUDE': np.array([-40.0]),
            },
        }

    def test_all_positions(self):
        df = trajectory_positions(self.data)

        assert list(df.columns) == ['WMOID', 'JULD', 'LONGITUDE', 'LATITUDE', 'ESTIMATED']
        assert len(df) == 4
        assert not df['ESTIMATED'].any()
        assert df.iloc[0]['JULD'] == datetime(1950, 1, 1)

    def test_first_and_last(self):
        first = trajectory_positions(self.data, 'first')
        last = trajectory_positions(self.data, 'last')

        assert list(first['LONGITUDE']) == [-150.0, 10.0]
        assert list(last['LONGITUDE']) == [-148.0, 10.0]

    def test_estimated_from_position_qc(self):
        self.data[1900722]['POSITION_QC'] = np.array([b'1', b'8', b'1'], dtype='S1')

        df = trajectory_positions(self.data)

        assert list(df['ESTIMATED']) == [False, True, False, False]

    def test_invalid_selection(self):
        with pytest.raises(ValueError):
            trajectory_positions(self.data, 'middle')


class TestGoodProfileValues:
    """Test cases for QC based filtering of profile values"""

    def test_filter_by_flags_and_finite(self):
        values = [10.0, 11.0, np.nan, 13.0, 14.0]
        pres = [0.0, 10.0, 20.0, np.nan, 40.0]
        qc = np.array([b'1', b'4', b'1', b'1', b'2'], dtype='S1')

        good_values, good_pres = good_profile_values(values, pres, qc)

        assert list(good_values) == [10.0, 14.0]
        assert list(good_pres) == [0.0, 40.0]

    def test_custom_flags(self):
        good_values, _ = good_profile_values([1.0, 2.0, 3.0], [1.0, 2.0, 3.0], [1, 3, 4], qc_flags=[3, 4])
        assert list(good_values) == [2.0, 3.0]

    def test_shape_mismatch(self):
        with pytest.raises(ValueError):
            good_profile_values([1.0, 2.0], [1.0], [1, 1])
