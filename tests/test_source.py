"""
PlutusScan Source Reference Tests
"""

import unittest

from plutusscan import VcsType, is_valid_commit_hash, parse_source_url


class TestParseSourceUrl(unittest.TestCase):

    def test_github(self):
        parsed = parse_source_url("http://github.com/easy1staking-com/cardano-recurring-payment")
        self.assertEqual(parsed.vcs_type, VcsType.GITHUB)
        self.assertEqual(parsed.org_or_group, "easy1staking-com")
        self.assertEqual(parsed.repo, "cardano-recurring-payment")
        self.assertEqual(parsed.protocol, "http")
        self.assertEqual(parsed.clone_url, "https://github.com/easy1staking-com/cardano-recurring-payment.git")

    def test_git_suffix_stripped(self):
        parsed = parse_source_url("https://codeberg.org/org/repo.git")
        self.assertEqual(parsed.vcs_type, VcsType.CODEBERG)
        self.assertEqual(parsed.repo, "repo")

    def test_gitlab_nested_groups(self):
        parsed = parse_source_url("https://gitlab.com/group/subgroup/project")
        self.assertEqual(parsed.vcs_type, VcsType.GITLAB)
        self.assertEqual(parsed.org_or_group, "group/subgroup")
        self.assertEqual(parsed.repo, "project")
        self.assertEqual(parsed.clone_url, "https://gitlab.com/group/subgroup/project.git")

    def test_bitbucket_and_self_hosted(self):
        self.assertEqual(parse_source_url("https://bitbucket.org/team/repo").vcs_type, VcsType.BITBUCKET)
        parsed = parse_source_url("https://git.example.com/team/repo/tree/main")
        self.assertEqual(parsed.vcs_type, VcsType.SELF_HOSTED_GIT)
        self.assertEqual(parsed.repo, "repo")

    def test_decentralized(self):
        parsed = parse_source_url("ipfs://bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi")
        self.assertEqual(parsed.vcs_type, VcsType.DECENTRALIZED)
        self.assertEqual(parsed.repo, "bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi")

    def test_unparseable(self):
        for url in ("", "not a url", "https://github.com/only-owner", "ftp://github.com/a/b", None):
            with self.subTest(url=url):
                self.assertIsNone(parse_source_url(url))


class TestCommitHash(unittest.TestCase):

    def test_lengths(self):
        self.assertTrue(is_valid_commit_hash("35f1a0d51c8663782ab052f869d5c82b756e8615"))
        self.assertTrue(is_valid_commit_hash("ab" * 32))
        self.assertFalse(is_valid_commit_hash("35f1a0d"))
        self.assertFalse(is_valid_commit_hash("zz" * 20))


if __name__ == "__main__":
    unittest.main()
