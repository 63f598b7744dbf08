"""OpenShift specific cluster configuration objects"""
