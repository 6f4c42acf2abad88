import unittest

from support import API, APITestCase

PARTS = [
    {"name": "Oil filter", "part_number": "OF-123", "quantity": 1, "price": 12.5},
    {"name": "5W-30 oil", "quantity": 5, "price": 8},
]
LABOR = [{"description": "Oil change", "hours": 0.5, "rate": 80}]


class TestWorkOrders(APITestCase):

    def setUp(self):
        super().setUp()
        self.customer = self.create_customer()
        self.vehicle = self.create_vehicle(self.customer['id'], current_mileage=42000)

    def test_create_computes_totals(self):
        """Estimate is the sum of parts and labor"""
        created = self.create_work_order(self.customer['id'], self.vehicle['id'], parts=PARTS, labor=LABOR)
        self.assertEqual(created['status'], 'Created')
        self.assertEqual(created['priority'], 'Normal')
        self.assertAlmostEqual(created['total_estimate'], 92.5)
        self.assertIsNone(created['total_actual'])
        self.assertEqual(created['customer']['name'], 'Jane Doe')
        self.assertEqual(created['vehicle']['id'], self.vehicle['id'])

    def test_service_requested_is_split_into_lines(self):
        created = self.create_work_order(
            self.customer['id'], self.vehicle['id'],
            service_requested="Oil change\n\nRotate tires\n",
        )
        self.assertEqual([s['description'] for s in created['services']], ['Oil change', 'Rotate tires'])
        self.assertEqual(created['service_requested'], 'Oil change\nRotate tires')

    def test_services_win_over_service_requested(self):
        created = self.create_work_order(
            self.customer['id'], self.vehicle['id'],
            services=[{"description": "Brake pads"}, {"description": "Brake fluid flush"}],
            service_requested="ignored",
        )
        self.assertEqual(created['service_requested'], 'Brake pads\nBrake fluid flush')

    def test_services_as_json_string(self):
        created = self.create_work_order(
            self.customer['id'], self.vehicle['id'],
            services='["Alignment", "Wiper blades"]',
            service_requested=None,
        )
        self.assertEqual([s['description'] for s in created['services']], ['Alignment', 'Wiper blades'])
        self.assertEqual(created['service_requested'], 'Alignment\nWiper blades')

    def test_update_services_resyncs_text(self):
        created = self.create_work_order(self.customer['id'], self.vehicle['id'])
        response = self.client.put(f"{API}/work-orders/{created['id']}", json={
            "services": [{"description": "Timing belt"}],
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['service_requested'], 'Timing belt')

    def test_vehicle_must_belong_to_customer(self):
        other = self.create_customer(name="John Smith", phone="555-987-6543", email="john@example.com")
        response = self.client.post(f"{API}/work-orders/", json={
            "customer_id": other['id'], "vehicle_id": self.vehicle['id'], "service_requested": "Oil change",
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'The vehicle does not belong to this customer')

    def test_missing_vehicle_is_404(self):
        response = self.client.post(f"{API}/work-orders/", json={
            "customer_id": self.customer['id'], "vehicle_id": 999, "service_requested": "Oil change",
        })
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['message'], 'No vehicle found with that ID')

    def test_missing_technician_is_404(self):
        response = self.client.post(f"{API}/work-orders/", json={
            "customer_id": self.customer['id'], "vehicle_id": self.vehicle['id'],
            "service_requested": "Oil change", "assigned_technician_id": 999,
        })
        self.assertEqual(response.status_code, 404)

    def test_mileage_syncs_to_vehicle(self):
        """Odometer readings on a work order land in the vehicle history once"""
        created = self.create_work_order(self.customer['id'], self.vehicle['id'], current_mileage=45000)

        vehicle = self.client.get(f"{API}/vehicles/{self.vehicle['id']}").json()
        self.assertEqual(vehicle['current_mileage'], 45000)
        self.assertEqual(vehicle['mileage_history'][-1]['source'], f"Work Order #{created['id']}")
        self.assertEqual(len(vehicle['mileage_history']), 2)

        # Saving the same reading again is not a new entry
        self.client.put(f"{API}/work-orders/{created['id']}", json={"current_mileage": 45000})
        vehicle = self.client.get(f"{API}/vehicles/{self.vehicle['id']}").json()
        self.assertEqual(len(vehicle['mileage_history']), 2)

        self.client.put(f"{API}/work-orders/{created['id']}", json={"current_mileage": 45100})
        vehicle = self.client.get(f"{API}/vehicles/{self.vehicle['id']}").json()
        self.assertEqual(vehicle['current_mileage'], 45100)
        self.assertEqual(len(vehicle['mileage_history']), 3)

    def test_notifiable_status_change_notifies(self):
        created = self.create_work_order(self.customer['id'], self.vehicle['id'])

        response = self.client.put(f"{API}/work-orders/{created['id']}", json={"status": "Parts Received"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.notifier.sent, [(created['id'], 'Parts Received')])

        # Same status again, then a status customers are not told about
        self.client.put(f"{API}/work-orders/{created['id']}", json={"status": "Parts Received"})
        self.client.put(f"{API}/work-orders/{created['id']}", json={"status": "On Hold"})
        self.assertEqual(len(self.notifier.sent), 1)

    def test_other_updates_do_not_notify(self):
        created = self.create_work_order(self.customer['id'], self.vehicle['id'])
        response = self.client.put(f"{API}/work-orders/{created['id']}", json={
            "diagnostic_notes": "Leaking oil pan gasket",
        })
        self.assertEqual(response.json()['diagnostic_notes'], 'Leaking oil pan gasket')
        self.assertEqual(self.notifier.sent, [])

    def test_status_patch(self):
        created = self.create_work_order(self.customer['id'], self.vehicle['id'], parts=PARTS, labor=LABOR)
        response = self.client.patch(f"{API}/work-orders/{created['id']}/status", json={
            "status": "Completed - Paid",
        })
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['status'], 'Completed - Paid')
        self.assertAlmostEqual(data['total_actual'], 92.5)
        self.assertEqual(self.notifier.sent, [(created['id'], 'Completed - Paid')])

    def test_status_patch_requires_status(self):
        created = self.create_work_order(self.customer['id'], self.vehicle['id'])
        response = self.client.patch(f"{API}/work-orders/{created['id']}/status", json={})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Please provide a status')

    def test_unknown_status_is_rejected(self):
        created = self.create_work_order(self.customer['id'], self.vehicle['id'])
        response = self.client.patch(f"{API}/work-orders/{created['id']}/status", json={"status": "Teleported"})
        self.assertEqual(response.status_code, 400)

    def test_add_part_and_labor(self):
        created = self.create_work_order(self.customer['id'], self.vehicle['id'])

        response = self.client.post(f"{API}/work-orders/{created['id']}/parts", json=PARTS[0])
        self.assertEqual(response.status_code, 200)
        self.assertAlmostEqual(response.json()['total_estimate'], 12.5)

        response = self.client.post(f"{API}/work-orders/{created['id']}/labor", json={
            "description": "Diagnosis", "hours": 1.5,
        })
        data = response.json()
        self.assertEqual(len(data['labor']), 1)
        self.assertEqual(data['labor'][0]['rate'], 75)
        self.assertAlmostEqual(data['total_estimate'], 12.5 + 112.5)

    def test_invoice(self):
        created = self.create_work_order(self.customer['id'], self.vehicle['id'], parts=PARTS, labor=LABOR)
        response = self.client.get(f"{API}/work-orders/{created['id']}/invoice")
        self.assertEqual(response.status_code, 200)
        invoice = response.json()
        self.assertEqual(invoice['work_order_id'], created['id'])
        self.assertEqual(invoice['customer']['address']['city'], 'Springfield')
        self.assertAlmostEqual(invoice['parts_cost'], 52.5)
        self.assertAlmostEqual(invoice['labor_cost'], 40)
        self.assertAlmostEqual(invoice['subtotal'], 92.5)
        self.assertAlmostEqual(invoice['tax_rate'], 0.08)
        self.assertAlmostEqual(invoice['tax'], 7.4)
        self.assertAlmostEqual(invoice['total_with_tax'], 99.9)

    def test_filters(self):
        first = self.create_work_order(self.customer['id'], self.vehicle['id'])
        second = self.create_work_order(self.customer['id'], self.vehicle['id'], status="Parts Ordered")

        response = self.client.get(f"{API}/work-orders/", params={"status": "Parts Ordered"})
        self.assertEqual([w['id'] for w in response.json()], [second['id']])

        response = self.client.get(f"{API}/work-orders/", params={"vehicle_id": self.vehicle['id']})
        self.assertEqual({w['id'] for w in response.json()}, {first['id'], second['id']})

        response = self.client.get(f"{API}/work-orders/status/Parts Ordered")
        self.assertEqual(response.status_code, 200)
        self.assertEqual([w['id'] for w in response.json()], [second['id']])

    def test_search(self):
        brakes = self.create_work_order(self.customer['id'], self.vehicle['id'], service_requested="Replace brake pads")
        self.create_work_order(self.customer['id'], self.vehicle['id'], diagnostic_notes="Rattle")

        response = self.client.get(f"{API}/work-orders/search", params={"query": "BRAKE"})
        self.assertEqual([w['id'] for w in response.json()], [brakes['id']])

        response = self.client.get(f"{API}/work-orders/search", params={"query": "rattle"})
        self.assertEqual(len(response.json()), 1)

        response = self.client.get(f"{API}/work-orders/search")
        self.assertEqual(response.status_code, 400)

    def test_search_ignores_line_item_field_names(self):
        self.create_work_order(self.customer['id'], self.vehicle['id'], parts=PARTS, labor=LABOR)

        for query in ("description", "vendor", "price"):
            response = self.client.get(f"{API}/work-orders/search", params={"query": query})
            self.assertEqual(response.json(), [], query)

        response = self.client.get(f"{API}/work-orders/search", params={"query": "oil CHANGE"})
        self.assertEqual(len(response.json()), 1)

    def test_delete_removes_from_service_history(self):
        created = self.create_work_order(self.customer['id'], self.vehicle['id'])
        response = self.client.delete(f"{API}/work-orders/{created['id']}")
        self.assertEqual(response.status_code, 204)

        response = self.client.get(f"{API}/work-orders/{created['id']}")
        self.assertEqual(response.status_code, 404)
        vehicle = self.client.get(f"{API}/vehicles/{self.vehicle['id']}").json()
        self.assertEqual(vehicle['service_history'], [])


if __name__ == '__main__':
    unittest.main(verbosity=2)
