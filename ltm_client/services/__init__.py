"""
Services Package - BIG-IP LTM access for ltm-cert-report

Modules:
- session: token login, lazy renewal and authenticated calls (LTMClient)
- fetchers: certificate / client-ssl profile / virtual server snapshots
- crossref: certificate -> profile -> virtual matching
- report: expiring-certificate report rows
- operations: upload, key/cert install, profile create/update, bash, listings
"""
