import unittest


def test_suite():
    """
    Collect all of the tests together in a single suite.
    """
    test_module_names = [
        'message',
        'ax',
        'consumer',
        'discover',
        'fetchers',
    ]

    test_modules = [
        __import__('openid_ax.test.test_{}'.format(name), {}, {}, ['unused'])
        for name in test_module_names
        ]

    loader = unittest.TestLoader()
    suite = unittest.TestSuite()
    for m in test_modules:
        suite.addTest(loader.loadTestsFromModule(m))
    return suite
