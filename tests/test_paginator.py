"""Tests for $skip/$top pagination."""

import logging
import unittest

from fetchers.paginator import fetch_paginated


class PagedClient:
    """Serves ``total`` numbered records; records every request's params."""

    def __init__(self, total, fail_at_skip=None, always_full=False):
        self.records = [{'id': str(i)} for i in range(total)]
        self.fail_at_skip = fail_at_skip
        self.always_full = always_full
        self.calls = []

    def get(self, endpoint, params=None):
        self.calls.append(dict(params))
        skip, top = params['$skip'], params['$top']
        if skip == self.fail_at_skip:
            return None
        if self.always_full:
            return [{'id': str(skip + i)} for i in range(top)]
        return self.records[skip:skip + top]


class TestFetchPaginated(unittest.TestCase):
    def setUp(self):
        self.logger = logging.getLogger('tests.paginator')

    def test_partial_last_page(self):
        client = PagedClient(250)
        records = fetch_paginated(client, '/articles', 'id', page_size=100, logger=self.logger)

        self.assertEqual(len(records), 250)
        self.assertEqual(len(client.calls), 3)

    def test_exact_multiple_needs_one_extra_request(self):
        client = PagedClient(200)
        records = fetch_paginated(client, '/articles', 'id', page_size=100, logger=self.logger)

        self.assertEqual(len(records), 200)
        self.assertEqual(len(client.calls), 3)

    def test_order_and_offsets(self):
        client = PagedClient(7)
        records = fetch_paginated(client, '/articles', 'id,summary', page_size=3, logger=self.logger)

        self.assertEqual([r['id'] for r in records], [str(i) for i in range(7)])
        self.assertEqual([c['$skip'] for c in client.calls], [0, 3, 6])
        self.assertTrue(all(c['$top'] == 3 for c in client.calls))
        self.assertTrue(all(c['fields'] == 'id,summary' for c in client.calls))

    def test_empty_result(self):
        client = PagedClient(0)
        self.assertEqual(fetch_paginated(client, '/articles', 'id', logger=self.logger), [])
        self.assertEqual(len(client.calls), 1)

    def test_absent_page_stops_with_records_so_far(self):
        client = PagedClient(300, fail_at_skip=100)
        records = fetch_paginated(client, '/articles', 'id', page_size=100, logger=self.logger)

        self.assertEqual(len(records), 100)
        self.assertEqual(len(client.calls), 2)

    def test_max_pages_guard(self):
        client = PagedClient(0, always_full=True)
        with self.assertLogs(self.logger, level='WARNING') as logs:
            records = fetch_paginated(client, '/articles', 'id', page_size=5, max_pages=4, logger=self.logger)

        self.assertEqual(len(client.calls), 4)
        self.assertEqual(len(records), 20)
        self.assertIn("after 4 pages", logs.output[0])

    def test_invalid_page_size(self):
        with self.assertRaises(ValueError):
            fetch_paginated(PagedClient(1), '/articles', 'id', page_size=0)


if __name__ == '__main__':
    unittest.main()
