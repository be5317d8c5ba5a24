"""Tests for :mod:`acmidm_login.triplestore`."""

from unittest import TestCase, mock

import requests

from .. import triplestore
from ..config import StoreConfig
from ..exceptions import QueryFailed, UpdateFailed

ENDPOINT = 'http://database:8890/sparql'


def _mock_requests(mock_requests, response=None):
    mock_requests.exceptions = requests.exceptions
    mock_http = mock.MagicMock()
    if response is not None:
        mock_http.post.return_value = response
    mock_requests.Session.return_value = mock_http
    return mock_http


class TestSPARQLClient(TestCase):
    """The SPARQL client talks to the endpoint with the SPARQL protocol."""

    @mock.patch(f'{triplestore.__name__}.requests')
    def test_query(self, mock_requests):
        """Results are flattened to variable/value mappings."""
        response = mock.MagicMock()
        response.json.return_value = {
            'head': {'vars': ['account', 'accountId']},
            'results': {'bindings': [{
                'account': {'type': 'uri',
                            'value': 'http://data.lblod.info/id/account/1'},
                'accountId': {'type': 'literal', 'value': '1'}
            }]}
        }
        mock_http = _mock_requests(mock_requests, response)

        client = triplestore.SPARQLClient(ENDPOINT, timeout=5)
        rows = client.query('SELECT ?account ?accountId WHERE { ?a ?b ?c }')

        self.assertEqual(rows, [{
            'account': 'http://data.lblod.info/id/account/1',
            'accountId': '1'
        }])
        args, kwargs = mock_http.post.call_args
        self.assertEqual(args[0], ENDPOINT)
        self.assertEqual(kwargs['data'],
                         {'query': 'SELECT ?account ?accountId WHERE '
                                   '{ ?a ?b ?c }'})
        self.assertEqual(kwargs['headers']['Accept'],
                         'application/sparql-results+json')
        self.assertEqual(kwargs['timeout'], 5)

    @mock.patch(f'{triplestore.__name__}.requests')
    def test_query_without_results(self, mock_requests):
        """An empty result set gives an empty list."""
        response = mock.MagicMock()
        response.json.return_value = {'head': {'vars': ['group']},
                                      'results': {'bindings': []}}
        _mock_requests(mock_requests, response)
        client = triplestore.SPARQLClient(ENDPOINT)
        self.assertEqual(client.query('SELECT ?group WHERE {}'), [])

    @mock.patch(f'{triplestore.__name__}.requests')
    def test_unbound_variables(self, mock_requests):
        """Variables that are not bound are left out."""
        response = mock.MagicMock()
        response.json.return_value = {
            'head': {'vars': ['a', 'b']},
            'results': {'bindings': [{'a': {'type': 'literal',
                                            'value': 'x'}}]}
        }
        _mock_requests(mock_requests, response)
        client = triplestore.SPARQLClient(ENDPOINT)
        self.assertEqual(client.query('SELECT ?a ?b WHERE {}'), [{'a': 'x'}])

    @mock.patch(f'{triplestore.__name__}.requests')
    def test_ask(self, mock_requests):
        """ASK queries return the boolean answer."""
        response = mock.MagicMock()
        response.json.return_value = {'head': {}, 'boolean': True}
        _mock_requests(mock_requests, response)
        client = triplestore.SPARQLClient(ENDPOINT)
        self.assertTrue(client.ask('ASK {}'))

    @mock.patch(f'{triplestore.__name__}.requests')
    def test_update(self, mock_requests):
        """Updates are posted to the update endpoint."""
        mock_http = _mock_requests(mock_requests, mock.MagicMock())
        client = triplestore.SPARQLClient(ENDPOINT,
                                          'http://database:8890/update')
        client.update('INSERT DATA { <a:b> <a:c> <a:d> }')
        args, kwargs = mock_http.post.call_args
        self.assertEqual(args[0], 'http://database:8890/update')
        self.assertEqual(kwargs['data'],
                         {'update': 'INSERT DATA { <a:b> <a:c> <a:d> }'})

    @mock.patch(f'{triplestore.__name__}.requests')
    def test_headers(self, mock_requests):
        """Extra headers are sent with every request."""
        mock_http = _mock_requests(mock_requests)
        triplestore.SPARQLClient(ENDPOINT, headers={'mu-auth-sudo': 'true'})
        mock_http.headers.update.assert_called_once_with(
            {'mu-auth-sudo': 'true'}
        )

    @mock.patch(f'{triplestore.__name__}.requests')
    def test_connection_failed(self, mock_requests):
        """:class:`.QueryFailed` is raised when the endpoint is down."""
        mock_http = _mock_requests(mock_requests)
        mock_http.post.side_effect = requests.exceptions.ConnectionError
        client = triplestore.SPARQLClient(ENDPOINT)
        with self.assertRaises(QueryFailed):
            client.query('SELECT * WHERE { ?s ?p ?o }')
        with self.assertRaises(UpdateFailed):
            client.update('INSERT DATA { <a:b> <a:c> <a:d> }')

    @mock.patch(f'{triplestore.__name__}.requests')
    def test_error_response(self, mock_requests):
        """Error statuses are raised as failures."""
        response = mock.MagicMock()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            '400 Client Error: Bad Request'
        )
        _mock_requests(mock_requests, response)
        client = triplestore.SPARQLClient(ENDPOINT)
        with self.assertRaises(QueryFailed):
            client.query('SELECT nonsense')
        with self.assertRaises(UpdateFailed):
            client.update('INSERT nonsense')

    @mock.patch(f'{triplestore.__name__}.requests')
    def test_malformed_response(self, mock_requests):
        """Responses that are not SPARQL JSON results are failures."""
        response = mock.MagicMock()
        response.json.return_value = {'unexpected': 'shape'}
        _mock_requests(mock_requests, response)
        client = triplestore.SPARQLClient(ENDPOINT)
        with self.assertRaises(QueryFailed):
            client.query('SELECT * WHERE { ?s ?p ?o }')
        with self.assertRaises(QueryFailed):
            client.ask('ASK {}')

    @mock.patch(f'{triplestore.__name__}.requests')
    def test_invalid_json(self, mock_requests):
        """Responses that are not JSON are failures."""
        response = mock.MagicMock()
        response.json.side_effect = ValueError('Expecting value')
        _mock_requests(mock_requests, response)
        client = triplestore.SPARQLClient(ENDPOINT)
        with self.assertRaises(QueryFailed):
            client.query('SELECT * WHERE { ?s ?p ?o }')


class TestMemoryStore(TestCase):
    """The memory store evaluates SPARQL against an rdflib dataset."""

    def test_update_and_query(self):
        """Data that is inserted can be queried."""
        store = triplestore.MemoryStore()
        store.update('INSERT DATA { GRAPH <http://g> { '
                     '<http://s> <http://p> "o" . } }')
        rows = store.query('SELECT ?s ?o WHERE { GRAPH <http://g> '
                           '{ ?s <http://p> ?o } }')
        self.assertEqual(rows, [{'s': 'http://s', 'o': 'o'}])

    def test_graphs_are_separate(self):
        """Data in one graph is not visible in another."""
        store = triplestore.MemoryStore()
        store.update('INSERT DATA { GRAPH <http://g> { '
                     '<http://s> <http://p> "o" . } }')
        rows = store.query('SELECT ?s WHERE { GRAPH <http://other> '
                           '{ ?s ?p ?o } }')
        self.assertEqual(rows, [])

    def test_ask(self):
        """ASK queries are answered."""
        store = triplestore.MemoryStore()
        self.assertTrue(store.ask('ASK {}'))
        self.assertFalse(store.ask('ASK { ?s ?p ?o }'))

    def test_invalid_query(self):
        """Queries that cannot be parsed raise :class:`.QueryFailed`."""
        store = triplestore.MemoryStore()
        with self.assertRaises(QueryFailed):
            store.query('SELECT WHERE {')
        with self.assertRaises(QueryFailed):
            store.ask('ASK {')

    def test_invalid_update(self):
        """Updates that cannot be parsed raise :class:`.UpdateFailed`."""
        store = triplestore.MemoryStore()
        with self.assertRaises(UpdateFailed):
            store.update('INSERT DATA {')


class TestGetStore(TestCase):
    """Tests for :func:`.triplestore.get_store`."""

    def test_memory(self):
        """The ``memory:`` endpoint selects the in-memory store."""
        store = triplestore.get_store(StoreConfig(endpoint='memory:'))
        self.assertIsInstance(store, triplestore.MemoryStore)

    def test_sparql(self):
        """Other endpoints get a SPARQL client."""
        config = StoreConfig(endpoint=ENDPOINT, timeout=2.5)
        store = triplestore.get_store(config)
        self.assertIsInstance(store, triplestore.SPARQLClient)
        self.assertEqual(store.endpoint, ENDPOINT)
        self.assertEqual(store.update_endpoint, ENDPOINT)
        self.assertEqual(store.timeout, 2.5)
