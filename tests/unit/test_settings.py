"""Unit tests for defaults.settings"""
from unittest import TestCase
import pytest
from es_setup.defaults.settings import aws_partition, footer, placeholder_delimiters
from es_setup.exceptions import FeatureNotSupported

class TestPlaceholderDelimiters(TestCase):
    def test_default(self):
        self.assertEqual(('{{', '}}'), placeholder_delimiters())
    def test_dollar(self):
        self.assertEqual(('${', '}'), placeholder_delimiters('dollar'))
    def test_unsupported(self):
        with pytest.raises(FeatureNotSupported, match=r'percent'):
            placeholder_delimiters('percent')

class TestAwsPartition(TestCase):
    def test_partitions(self):
        self.assertEqual('aws', aws_partition('eu-west-1'))
        self.assertEqual('aws-cn', aws_partition('cn-northwest-1'))
        self.assertEqual('aws-us-gov', aws_partition('us-gov-east-1'))
        self.assertEqual('aws', aws_partition(None))

class TestFooter(TestCase):
    def test_version(self):
        self.assertIn('es-setup 1.2.3', footer('1.2.3'))
