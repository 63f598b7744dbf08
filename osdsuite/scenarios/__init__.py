"""End-to-end acceptance scenarios run against the cluster under test"""
