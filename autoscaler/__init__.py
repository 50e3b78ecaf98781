"""
autoscaler — instance-type modeling core of a cluster autoscaler.

Subpackages:
    shared         — value types: Quantity, ResourceList, Requirements,
                     label vocabulary, input models
    cloudprovider  — derivation engine: InstanceType and its components
"""
